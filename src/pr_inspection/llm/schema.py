"""
Review Tool Schema

Function-calling tool definition that forces the model to answer with a
structured review.
"""

REVIEW_FUNCTION_NAME = "returnReview"

_COMMENT_SCHEMA = {
    "type": "object",
    "properties": {
        "content": {"type": "string", "description": "The text of the comment."},
        "commentType": {"type": "number", "description": "2 for regular comment."},
    },
    "required": ["content", "commentType"],
}

_POSITION_SCHEMA = {
    "type": "object",
    "properties": {
        "line": {"type": "number", "description": "1-based line number in the new version of the file."},
        "offset": {"type": "number", "description": "1-based character offset within the line."},
    },
    "required": ["line", "offset"],
}

_THREAD_SCHEMA = {
    "type": "object",
    "properties": {
        "comments": {
            "type": "array",
            "description": "List of comments in this thread.",
            "items": _COMMENT_SCHEMA,
        },
        "status": {"type": "number", "description": "Thread status, 1 for active."},
        "threadContext": {
            "type": "object",
            "description": "Context for the thread.",
            "properties": {
                "filePath": {"type": "string", "description": "Path to the file for this thread."},
                "rightFileStart": _POSITION_SCHEMA,
                "rightFileEnd": _POSITION_SCHEMA,
            },
            "required": ["filePath"],
        },
        "confidenceScore": {
            "type": "number",
            "description": "Confidence in the validity of the comment, from 1 (low) to 10 (high).",
            "minimum": 1,
            "maximum": 10,
        },
    },
    "required": ["comments", "status", "threadContext", "confidenceScore"],
}

REVIEW_TOOL = {
    "type": "function",
    "function": {
        "name": REVIEW_FUNCTION_NAME,
        "description": "Return a code review in structured format.",
        "parameters": {
            "type": "object",
            "properties": {
                "threads": {
                    "type": "array",
                    "description": "Review threads.",
                    "items": _THREAD_SCHEMA,
                },
            },
            "required": ["threads"],
        },
    },
}

REVIEW_TOOL_CHOICE = {"type": "function", "function": {"name": REVIEW_FUNCTION_NAME}}

#!/usr/bin/env python3
"""
Comment Position Correction Demo

Parses a small diff and corrects the anchors of a review whose line
numbers drifted away from the diff.

Usage:
    python examples/comment_position_demo.py
"""

import sys
import os
import json
import logging

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pr_inspection.diff import DiffParser
from pr_inspection.models import Review
from pr_inspection.review import CommentPositionFixer


DIFF = """diff --git a/src/cart.py b/src/cart.py
index 3b18e51..a9c2f7d 100644
--- a/src/cart.py
+++ b/src/cart.py
@@ -10,4 +10,5 @@ class Cart:
     def total(self):
-        return sum(item.price for item in self.items)
+        subtotal = sum(item.price for item in self.items)
+        return subtotal * (1 - self.discount)

     def clear(self):
diff --git a/src/legacy.py b/src/legacy.py
deleted file mode 100644
index 7f0c1aa..0000000
--- a/src/legacy.py
+++ /dev/null
@@ -1,2 +0,0 @@
-def old_total(items):
-    return sum(items)
"""

MODEL_OUTPUT = {
    "threads": [
        {
            "comments": [{"content": "`return subtotal * (1 - self.discount)` allows a negative total."}],
            "status": 1,
            "threadContext": {"filePath": "/src/cart.py", "rightFileStart": {"line": 3, "offset": 1}},
            "confidenceScore": 8,
        },
        {
            "comments": [{"content": "Consider caching the total."}],
            "status": 1,
            "threadContext": {"filePath": "/src/cart.py", "rightFileStart": {"line": 80, "offset": 1}},
            "confidenceScore": 4,
        },
        {
            "comments": [{"content": "This helper is still referenced elsewhere."}],
            "status": 1,
            "threadContext": {"filePath": "/src/legacy.py", "rightFileStart": {"line": 1, "offset": 1}},
            "confidenceScore": 6,
        },
    ]
}


def setup_logging():
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def print_diff_summary(parsed_diff):
    """Print the files and valid target lines of a parsed diff."""
    print("📄 Parsed diff")
    print("-" * 30)
    for file_diff in parsed_diff:
        print(f"{file_diff.path} ({file_diff.change_type}): "
              f"+{file_diff.additions} -{file_diff.deletions}, "
              f"target lines {file_diff.target_line_numbers()}")
    print()


def main():
    """Main demo function."""
    setup_logging()

    parsed_diff = DiffParser().parse(DIFF)
    print_diff_summary(parsed_diff)

    review = Review.from_model_output(MODEL_OUTPUT)
    fixed = CommentPositionFixer().fix(review, parsed_diff)

    print("🛠️  Corrected review")
    print("-" * 30)
    print(json.dumps(fixed.to_payload(), indent=2))
    print(f"\n✅ {len(fixed.threads)} of {len(review.threads)} threads kept")


if __name__ == "__main__":
    main()

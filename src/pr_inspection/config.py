"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split("\n") if item.strip()]


@dataclass
class ModelConfig:
    """언어 모델 API 설정"""
    ai_model: str = "gpt-4o"
    api_base_url: str = "https://api.openai.com/v1"
    api_key: Optional[str] = None
    azure_api_version: Optional[str] = None
    timeout_seconds: int = 60
    max_tokens: int = 128000


@dataclass
class ReviewConfig:
    """리뷰 생성 설정"""
    check_for_bugs: bool = True
    check_for_performance: bool = True
    check_for_best_practices: bool = True
    modified_lines_only: bool = True
    enable_comment_line_correction: bool = False
    enable_confidence_mode: bool = False
    confidence_threshold: float = 5.0
    additional_prompts: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    model: ModelConfig = field(default_factory=ModelConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        return cls(
            model=ModelConfig(
                ai_model=os.getenv("AI_MODEL", "gpt-4o"),
                api_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
                api_key=os.getenv("OPENAI_API_KEY"),
                azure_api_version=os.getenv("AZURE_API_VERSION") or None,
                timeout_seconds=int(os.getenv("MODEL_TIMEOUT", "60")),
                max_tokens=int(os.getenv("MAX_TOKENS", "128000")),
            ),
            review=ReviewConfig(
                check_for_bugs=_env_flag("CHECK_FOR_BUGS", "true"),
                check_for_performance=_env_flag("CHECK_FOR_PERFORMANCE", "true"),
                check_for_best_practices=_env_flag("CHECK_FOR_BEST_PRACTICES", "true"),
                modified_lines_only=_env_flag("MODIFIED_LINES_ONLY", "true"),
                enable_comment_line_correction=_env_flag("ENABLE_COMMENT_LINE_CORRECTION", "false"),
                enable_confidence_mode=_env_flag("ENABLE_CONFIDENCE_MODE", "false"),
                confidence_threshold=float(os.getenv("CONFIDENCE_THRESHOLD", "5")),
                additional_prompts=_env_list("ADDITIONAL_PROMPTS"),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            debug=_env_flag("DEBUG", "false"),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(
            model=ModelConfig(**(config_data.get('model') or {})),
            review=ReviewConfig(**(config_data.get('review') or {})),
            logging=LoggingConfig(**(config_data.get('logging') or {})),
            debug=config_data.get('debug', False),
        )

    def validate(self, require_api_key: bool = False) -> None:
        """설정 유효성 검사"""
        errors = []

        # API 키는 모델 호출 시에만 필수
        if require_api_key and not self.model.api_key:
            errors.append("Model API key is required")

        if self.model.max_tokens <= 0:
            errors.append("Max tokens must be positive")

        if self.model.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        # 신뢰도 임계값 검증
        if not 1.0 <= self.review.confidence_threshold <= 10.0:
            errors.append("Confidence threshold must be between 1 and 10")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'model': {
                'ai_model': self.model.ai_model,
                'api_base_url': self.model.api_base_url,
                'azure_api_version': self.model.azure_api_version,
                'timeout_seconds': self.model.timeout_seconds,
                'max_tokens': self.model.max_tokens,
                # 보안상 API 키는 제외
            },
            'review': {
                'check_for_bugs': self.review.check_for_bugs,
                'check_for_performance': self.review.check_for_performance,
                'check_for_best_practices': self.review.check_for_best_practices,
                'modified_lines_only': self.review.modified_lines_only,
                'enable_comment_line_correction': self.review.enable_comment_line_correction,
                'enable_confidence_mode': self.review.enable_confidence_mode,
                'confidence_threshold': self.review.confidence_threshold,
                'additional_prompts': list(self.review.additional_prompts),
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def _setup_logging(self) -> None:
        """로깅 설정 (debug 모드에서는 DEBUG 레벨)"""
        level = logging.DEBUG if self._config.debug else getattr(logging, self._config.logging.level.upper())
        logging.basicConfig(level=level, format=self._config.logging.format)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            log_path = os.path.abspath(self._config.logging.file_path)
            # 같은 파일 핸들러 중복 등록 방지
            if any(
                isinstance(h, RotatingFileHandler) and h.baseFilename == log_path
                for h in root_logger.handlers
            ):
                return

            handler = RotatingFileHandler(
                log_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))
            root_logger.addHandler(handler)

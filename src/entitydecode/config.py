"""
Decoding configuration.

A DecoderConfig is built once and handed to every Entity of a message.
Nothing in the library reads global state; from_env() is a convenience
for process wiring.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .services.charset import CandidateListDetector, CharsetManager, CharsetNormalizerDetector
from .services.headers import HeaderDecoder
from .services.middleware import MiddlewareStack
from .services.transfer import ContentTransferDecoder

logger = logging.getLogger(__name__)

DETECTORS = {
    'candidates': CandidateListDetector,
    'charset-normalizer': CharsetNormalizerDetector,
}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class DecoderConfig:
    """
    Services used to decode an entity.

    Attributes:
        charset_manager: Converts octets to text
        header_decoder: Decodes RFC 2047 encoded words (shares charset_manager)
        transfer_decoder: Reverses base64 / quoted-printable
        middleware: Post-processing applied by Entity.parse()
        transfer_encoding_charset_fallback: Guess a charset from the transfer
            encoding when none is declared and the body is not UTF-8
    """
    charset_manager: CharsetManager = field(default_factory=CharsetManager)
    header_decoder: Optional[HeaderDecoder] = None
    transfer_decoder: ContentTransferDecoder = field(default_factory=ContentTransferDecoder)
    middleware: MiddlewareStack = field(default_factory=MiddlewareStack)
    transfer_encoding_charset_fallback: bool = False

    def __post_init__(self):
        if self.header_decoder is None:
            object.__setattr__(self, 'header_decoder', HeaderDecoder(self.charset_manager))

    @classmethod
    def from_env(cls, middleware: Optional[MiddlewareStack] = None) -> 'DecoderConfig':
        """
        Build a config from environment variables.

        ENTITYDECODE_DETECTOR: "candidates" (default) or "charset-normalizer"
        ENTITYDECODE_TRANSFER_CHARSET_FALLBACK: "true" to enable the 8bit/7bit guess
        """
        detector_name = os.environ.get('ENTITYDECODE_DETECTOR', 'candidates').strip().lower()
        detector_class = DETECTORS.get(detector_name)
        if detector_class is None:
            logger.warning(f"Unknown detector '{detector_name}', using candidate list")
            detector_class = CandidateListDetector

        return cls(
            charset_manager=CharsetManager(detector=detector_class()),
            middleware=middleware or MiddlewareStack(),
            transfer_encoding_charset_fallback=_env_flag('ENTITYDECODE_TRANSFER_CHARSET_FALLBACK'),
        )

    def with_middleware(self, middleware: MiddlewareStack) -> 'DecoderConfig':
        return DecoderConfig(
            charset_manager=self.charset_manager,
            header_decoder=self.header_decoder,
            transfer_decoder=self.transfer_decoder,
            middleware=middleware,
            transfer_encoding_charset_fallback=self.transfer_encoding_charset_fallback,
        )


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Level comes from the argument, then LOG_LEVEL, then INFO.
    """
    level = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    package_logger = logging.getLogger('entitydecode')
    package_logger.setLevel(level)

    if not package_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        formatter = logging.Formatter('%(levelname)s - %(message)s')
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    return package_logger

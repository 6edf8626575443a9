#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/latextree/utils/encoding.py
"""Character encoding detection for LaTeX sources read from disk.

LaTeX sources are mostly UTF-8, but older documents are frequently Latin-1
or Windows-1252. Decoding tries strict UTF-8 first, then the encoding
reported by chardet, then a list of fallbacks.
"""

from __future__ import annotations

import logging

import chardet

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


def detect_encoding(
    data: bytes,
    sample_size: int = 8192,
    confidence_threshold: float = 0.7,
) -> str | None:
    """Detect the character encoding of binary data using chardet.

    Parameters
    ----------
    data : bytes
        Binary data to analyze
    sample_size : int, default 8192
        Number of bytes to sample for detection (uses first N bytes)
    confidence_threshold : float, default 0.7
        Minimum confidence level (0.0-1.0) required to trust detection

    Returns
    -------
    str | None
        Detected encoding name, or None when detection fails or the
        confidence is below the threshold

    """
    result = chardet.detect(data[:sample_size])
    if not result or not result.get("encoding"):
        logger.debug("chardet: No encoding detected")
        return None

    encoding = result["encoding"]
    confidence = result.get("confidence") or 0.0
    logger.debug(f"chardet detected encoding: {encoding} (confidence: {confidence:.2f})")

    if confidence >= confidence_threshold:
        return encoding
    logger.debug(f"chardet confidence {confidence:.2f} below threshold {confidence_threshold}")
    return None


def decode_latex_bytes(
    data: bytes,
    encoding: str | None = None,
    fallback_encodings: tuple[str, ...] = DEFAULT_FALLBACK_ENCODINGS,
) -> tuple[str, str]:
    """Decode LaTeX source bytes.

    Parameters
    ----------
    data : bytes
        Raw file content
    encoding : str, optional
        Encoding to use; skips detection when given
    fallback_encodings : tuple of str
        Encodings tried after UTF-8 and chardet

    Returns
    -------
    tuple of (str, str)
        The decoded text and the encoding that decoded it

    Raises
    ------
    UnicodeDecodeError
        If an explicit ``encoding`` cannot decode the data
    LookupError
        If an explicit ``encoding`` is unknown

    """
    if encoding is not None:
        return data.decode(encoding), encoding

    try:
        return data.decode("utf-8"), "utf-8"
    except UnicodeDecodeError as e:
        logger.debug(f"Not valid UTF-8: {e}")

    detected = detect_encoding(data)
    candidates = ([detected] if detected else []) + list(fallback_encodings)
    for candidate in candidates:
        try:
            text = data.decode(candidate)
        except (UnicodeDecodeError, LookupError) as e:
            logger.debug(f"Failed to decode with {candidate}: {e}")
            continue
        logger.debug(f"Successfully decoded with encoding: {candidate}")
        return text, candidate

    logger.warning("All encoding attempts failed, using utf-8 with error replacement")
    return data.decode("utf-8", errors="replace"), "utf-8"

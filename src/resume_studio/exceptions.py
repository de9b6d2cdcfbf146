"""Exception hierarchy for extraction, enhancement and synthesis."""

from __future__ import annotations


class ResumeStudioError(Exception):
    """Base class for every error raised by resume_studio."""


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class ExtractionError(ResumeStudioError):
    """Raised when a source document cannot be turned into a StructuredResume.

    Attributes:
        message: Error description
        source: File name or format the error refers to
    """

    def __init__(self, message: str, source: str | None = None):
        self.message = message
        self.source = source
        text = f"{message} ({source})" if source else message
        super().__init__(text)


class UnsupportedFormat(ExtractionError):
    """The declared format or file extension is not pdf, docx, txt or md."""


class CorruptDocument(ExtractionError):
    """The document container or PDF stream could not be opened."""


class EmptyDocument(ExtractionError):
    """The document opened fine but holds no extractable text."""


# ---------------------------------------------------------------------------
# Enhancement
# ---------------------------------------------------------------------------


class EnhancementError(ResumeStudioError):
    """Raised when the text-generation service cannot serve a request."""


class EnhancementServiceUnavailable(EnhancementError):
    """Service unreachable, authentication failed or the response was unusable."""


class EnhancementRateLimited(EnhancementError):
    """Service kept answering with rate-limit errors after all retries."""


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------


class SynthesisError(ResumeStudioError):
    """Raised by the document synthesizer."""


class OriginalTextNotFound(SynthesisError):
    """An original bullet has no single text node holding it verbatim.

    Recovered locally: the substitution is skipped and the bullet status
    becomes ``enhancedNotWritten``.
    """

    def __init__(self, text: str):
        self.text = text
        snippet = text[:80] + "..." if len(text) > 80 else text
        super().__init__(f"Original text not found in document: {snippet!r}")


class NoOriginalBytesAvailable(SynthesisError):
    """The résumé carries no editable office document; use template synthesis."""


class DocumentWriteError(SynthesisError):
    """The repackaged output container failed to reopen."""

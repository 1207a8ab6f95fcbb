from __future__ import annotations


class TransparencyError(RuntimeError):
    """Base class for recoverable engine failures (input is passed through)."""


class ImageDecodeError(TransparencyError):
    """The input bytes could not be decoded into an RGBA pixel buffer."""


class NoBackgroundEstimate(TransparencyError):
    """Sampling produced no usable background cluster."""


class RenderTargetError(TransparencyError):
    """The working-resolution surface could not be produced."""

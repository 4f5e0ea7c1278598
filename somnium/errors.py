"""Exceptions raised by somnium."""


class DreamError(Exception):
  """Base class of all somnium errors."""


class InputError(DreamError, ValueError):
  """Invalid request: bad parameters or an unusable source image."""


class ImageReadError(InputError, IOError):
  """The source image cannot be read or decoded."""


class OracleError(DreamError):
  """The loss cannot be built on the network, e.g. a layer is missing."""


class DreamCancelled(DreamError):
  """The rendering was cancelled through a cancellation token."""

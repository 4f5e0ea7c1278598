import threading

from somnium.errors import DreamCancelled


class CancellationToken:
  """Flag shared between a rendering and whoever may want to stop it.

  The rendering checks the token before every ascent step and every octave.
  """

  def __init__(self):
    self._event = threading.Event()

  def cancel(self):
    self._event.set()

  @property
  def cancelled(self):
    return self._event.is_set()

  def raise_if_cancelled(self):
    if self._event.is_set():
      raise DreamCancelled("Rendering cancelled.")

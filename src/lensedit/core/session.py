"""
Editing session state.

SessionController owns everything a screen shows for one editing session: the
selected input image and its preview, the instruction, the latest result or
error, and the phase. User actions and the asynchronous generation outcome
both go through it; subscribers receive an immutable SessionState snapshot
after every change and never touch the controller's fields directly.

One attempt may be in flight at a time. Each attempt carries a token; an
outcome is applied only when the session is still processing that same
attempt, so a select_image or reset issued mid-flight wins over a late result.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from types import TracebackType

from lensedit.core.client import FALLBACK_FAILURE_MESSAGE, GeminiClient
from lensedit.core.encoder import EncodedPart, ImageResource, encode_image
from lensedit.core.outcome import Failure, GenerationOutcome, Success
from lensedit.core.preview import PreviewHandle
from lensedit.logging_config import get_logger
from lensedit.utils.exceptions import ReadError

logger = get_logger(__name__)


class SessionPhase(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class InputImage:
    """Selected input image and the preview created for it."""

    resource: ImageResource
    media_type: str
    preview: PreviewHandle


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a session, handed to subscribers."""

    phase: SessionPhase
    input_image: InputImage | None
    instruction: str
    result_image: str | None
    error_message: str | None

    @property
    def can_submit(self) -> bool:
        return (
            self.input_image is not None
            and bool(self.instruction.strip())
            and self.phase is not SessionPhase.PROCESSING
        )


Listener = Callable[[SessionState], None]
Encoder = Callable[[ImageResource], Awaitable[EncodedPart]]
PreviewFactory = Callable[[bytes, str], PreviewHandle]


class SessionController:
    """State machine for one image editing session."""

    def __init__(
        self,
        client: GeminiClient | None = None,
        encoder: Encoder = encode_image,
        preview_factory: PreviewFactory = PreviewHandle.create,
    ) -> None:
        self._client = client or GeminiClient()
        self._encode = encoder
        self._preview_factory = preview_factory
        self._listeners: list[Listener] = []

        self._phase = SessionPhase.IDLE
        self._input_image: InputImage | None = None
        self._instruction = ""
        self._result_image: str | None = None
        self._error_message: str | None = None
        self._attempt = 0

    # -- observation ------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return SessionState(
            phase=self._phase,
            input_image=self._input_image,
            instruction=self._instruction,
            result_image=self._result_image,
            error_message=self._error_message,
        )

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener for state changes; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener failed")

    # -- transitions ------------------------------------------------------

    def select_image(self, resource: ImageResource) -> None:
        """
        Replace the input image.

        The previous preview is released. Result and error are cleared and the
        phase returns to idle. An attempt still in flight is abandoned.

        Raises:
            ReadError: If the resource cannot be read for the preview; the
                session is left unchanged
        """
        media_type = resource.media_type
        try:
            data = resource.read()
        except OSError as e:
            raise ReadError(f"Failed to read file: {e}", media_type=media_type) from e
        preview = self._preview_factory(data, media_type)

        if self._input_image is not None:
            self._input_image.preview.release()
        self._input_image = InputImage(resource=resource, media_type=media_type, preview=preview)
        self._result_image = None
        self._error_message = None
        self._phase = SessionPhase.IDLE
        self._attempt += 1
        logger.debug("Image selected media_type=%s", media_type)
        self._notify()

    def clear_image(self) -> None:
        """Drop the input image and release its preview; result and error are cleared."""
        if self._input_image is not None:
            self._input_image.preview.release()
            self._input_image = None
        self._result_image = None
        self._error_message = None
        self._phase = SessionPhase.IDLE
        self._attempt += 1
        self._notify()

    def set_instruction(self, text: str) -> None:
        self._instruction = text
        self._notify()

    async def submit(self) -> None:
        """
        Start a generation attempt and wait for its outcome.

        Does nothing when there is no image, the instruction is blank, or an
        attempt is already processing.
        """
        if not self.state.can_submit:
            logger.debug("Submit ignored phase=%s", self._phase.value)
            return
        assert self._input_image is not None

        self._attempt += 1
        token = self._attempt
        resource = self._input_image.resource
        instruction = self._instruction
        self._phase = SessionPhase.PROCESSING
        self._result_image = None
        self._error_message = None
        self._notify()

        outcome: GenerationOutcome
        try:
            encoded = await self._encode(resource)
        except ReadError as e:
            logger.error("Could not encode input image: %s", e)
            outcome = Failure(message=str(e) or FALLBACK_FAILURE_MESSAGE, error=e)
        else:
            outcome = await self._client.generate(encoded, instruction)
        self._apply(token, outcome)

    def _apply(self, token: int, outcome: GenerationOutcome) -> None:
        if self._phase is not SessionPhase.PROCESSING or token != self._attempt:
            logger.debug("Discarding stale outcome for attempt %d", token)
            return
        if isinstance(outcome, Success):
            self._result_image = outcome.result_image
            self._phase = SessionPhase.SUCCESS
        else:
            self._error_message = outcome.message
            self._phase = SessionPhase.ERROR
        self._notify()

    def reset(self) -> None:
        """Clear instruction, result and error; keep the input image and its preview."""
        self._instruction = ""
        self._result_image = None
        self._error_message = None
        self._phase = SessionPhase.IDLE
        self._attempt += 1
        self._notify()

    # -- teardown ---------------------------------------------------------

    def close(self) -> None:
        """Release the preview and drop the input image."""
        if self._input_image is not None:
            self._input_image.preview.release()
            self._input_image = None
        self._attempt += 1

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = [
    "InputImage",
    "SessionController",
    "SessionPhase",
    "SessionState",
]

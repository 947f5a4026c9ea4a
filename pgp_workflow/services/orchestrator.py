"""
Operation orchestration.

Launches the crypto call matching the resolved mode and publishes only the
result of the latest submission. Older calls are never cancelled at the
provider; their results are compared against the latest generation on arrival
and dropped.
"""

import asyncio
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

import structlog

from pgp_workflow.config import WorkflowConfig
from pgp_workflow.core.generation import Generation
from pgp_workflow.crypto.protocol import CryptoProvider, KeyHandle, UnlockedKeyHandle
from pgp_workflow.exceptions import CryptoError
from pgp_workflow.models.key import KeyKind
from pgp_workflow.models.operation import (
    ErrorKind,
    Mode,
    Operation,
    OperationStatus,
    VerificationResult,
)
from pgp_workflow.services.key_session import KeySession

logger = structlog.get_logger(__name__)

Publisher = Callable[[Operation | None], None]


@dataclass(frozen=True, slots=True)
class _Request:
    mode: Mode
    key_session: KeySession
    message_text: str


class OperationOrchestrator:
    """
    Runs crypto calls for a single consumer and publishes the latest outcome.

    Every `submit()` allocates a new generation. A result is published only if its
    generation is still the latest when it arrives, so published operations are
    monotonic in generation.

    Example:
        ```python
        orchestrator = OperationOrchestrator(provider, publish=print)
        orchestrator.submit(Mode.ENCRYPT, session, "Hello World")
        await orchestrator.wait_idle()
        ```
    """

    def __init__(
        self,
        provider: CryptoProvider,
        publish: Publisher,
        config: WorkflowConfig | None = None,
    ) -> None:
        """
        Args:
            provider: Crypto capability provider.
            publish: Called with each operation that becomes current, or None when
                there is nothing to show.
            config: Workflow configuration (debounce window).
        """
        self._provider = provider
        self._publish_callback = publish
        self._config = config or WorkflowConfig()

        self._generation = Generation()
        self._current: Operation | None = None
        self._parked: _Request | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def current(self) -> Operation | None:
        """Latest published operation."""
        return self._current

    @property
    def generation(self) -> int:
        """Latest allocated generation."""
        return self._generation.value

    @property
    def has_pending(self) -> bool:
        return len(self._tasks) > 0

    def submit(
        self,
        mode: Mode,
        key_session: KeySession,
        message_text: str,
        passphrase: str | None = None,
        *,
        debounce: bool = False,
    ) -> int:
        """
        Start the crypto call for `mode`. Returns immediately.

        Must be called from a running event loop.

        Args:
            mode: Mode to run.
            key_session: Session holding the key to use.
            message_text: Message input.
            passphrase: Passphrase to unlock a locked key before a DECRYPT or SIGN.
            debounce: Wait for the configured idle window before calling the provider.

        Returns:
            The generation allocated to this submission.
        """
        generation = self._generation.next()
        self._parked = None

        if mode is Mode.IDLE or not message_text.strip():
            self._publish(None)
            return generation

        request = _Request(mode=mode, key_session=key_session, message_text=message_text)
        if (
            mode.requires_secret
            and key_session.kind is KeyKind.PRIVATE_LOCKED
            and passphrase is None
        ):
            self._park(generation, request)
            return generation

        logger.debug("Submitting operation", generation=generation, mode=mode.value)
        self._publish(Operation(generation=generation, mode=mode, status=OperationStatus.PENDING))
        self._spawn(self._run(generation, request, passphrase, debounce))
        return generation

    def resume(self, key_session: KeySession) -> bool:
        """
        Re-submit the request parked waiting for `key_session` to unlock.

        Returns:
            True if a parked request was re-submitted under a fresh generation.
        """
        parked = self._parked
        if (
            parked is None
            or parked.key_session is not key_session
            or key_session.kind is not KeyKind.PRIVATE_UNLOCKED
        ):
            return False
        logger.debug("Resuming operation after unlock", mode=parked.mode.value)
        self.submit(parked.mode, key_session, parked.message_text)
        return True

    def invalidate(self) -> None:
        """Abandon every pending and parked submission and publish None."""
        self._generation.next()
        self._parked = None
        self._publish(None)

    async def wait_idle(self) -> None:
        """Wait until no background call is left, including ones started meanwhile."""
        while self._tasks:
            await asyncio.gather(*self._tasks)

    async def close(self) -> None:
        """Invalidate everything and wait for in-flight calls to settle."""
        self.invalidate()
        await self.wait_idle()

    def _park(self, generation: int, request: _Request) -> None:
        logger.debug("Operation waiting for unlock", generation=generation, mode=request.mode.value)
        self._parked = request
        self._publish(
            Operation(
                generation=generation,
                mode=request.mode,
                status=OperationStatus.AWAITING_UNLOCK,
            )
        )

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(
        self,
        generation: int,
        request: _Request,
        passphrase: str | None,
        debounce: bool,
    ) -> None:
        if debounce and self._config.debounce_seconds > 0:
            await asyncio.sleep(self._config.debounce_seconds)
            if not self._generation.is_current(generation):
                logger.debug("Debounced submission superseded", generation=generation)
                return

        session = request.key_session
        try:
            if (
                passphrase is not None
                and request.mode.requires_secret
                and session.kind is KeyKind.PRIVATE_LOCKED
            ):
                honored = await session.unlock(passphrase)
                if not honored and session.kind is not KeyKind.PRIVATE_UNLOCKED:
                    if self._generation.is_current(generation):
                        self._park(generation, request)
                    return
            output, verification = await self._call(request)
        except CryptoError as e:
            self._fail(generation, request.mode, e.kind, e)
            return
        except Exception as e:
            self._fail(generation, request.mode, ErrorKind.for_mode(request.mode), e)
            return

        self._complete(
            generation,
            Operation(
                generation=generation,
                mode=request.mode,
                status=OperationStatus.SUCCEEDED,
                output=output,
                verification=verification,
            ),
        )

    async def _call(self, request: _Request) -> tuple[str, VerificationResult | None]:
        session = request.key_session
        text = request.message_text
        match request.mode:
            case Mode.ENCRYPT:
                return await self._provider.encrypt(text, self._require_key(session)), None
            case Mode.DECRYPT:
                return await self._provider.decrypt(text, self._require_unlocked(session)), None
            case Mode.SIGN:
                return await self._provider.sign(text, self._require_unlocked(session)), None
            case Mode.VERIFY:
                result = await self._provider.verify(text, self._require_key(session))
                return result.text, result
            case _:
                msg = f"No crypto call for mode {request.mode.value}"
                raise ValueError(msg)

    @staticmethod
    def _require_key(session: KeySession) -> KeyHandle:
        if session.handle is None:
            msg = "No key loaded"
            raise ValueError(msg)
        return session.handle

    @staticmethod
    def _require_unlocked(session: KeySession) -> UnlockedKeyHandle:
        if session.unlocked_handle is None:
            msg = "Private key is not unlocked"
            raise ValueError(msg)
        return session.unlocked_handle

    def _fail(self, generation: int, mode: Mode, kind: ErrorKind, error: Exception) -> None:
        log = logger.warning if self._generation.is_current(generation) else logger.debug
        log(
            "Operation failed",
            generation=generation,
            mode=mode.value,
            error_type=type(error).__name__,
        )
        self._complete(
            generation,
            Operation(
                generation=generation,
                mode=mode,
                status=OperationStatus.FAILED,
                error_kind=kind,
                error_message=str(error),
            ),
        )

    def _complete(self, generation: int, operation: Operation) -> None:
        if not self._generation.is_current(generation):
            logger.debug(
                "Discarding stale result",
                generation=generation,
                latest=self._generation.value,
            )
            return
        logger.info(
            "Operation completed",
            generation=generation,
            mode=operation.mode.value,
            status=operation.status.value,
        )
        self._publish(operation)

    def _publish(self, operation: Operation | None) -> None:
        self._current = operation
        self._publish_callback(operation)

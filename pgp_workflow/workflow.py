"""
PGP workflow facade.

This is the main entry point for users of the library. It holds the key
session, the message text and the orchestrator, exposes the current state as an
observable snapshot, and accepts the inbound commands of the presentation layer.
"""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, Self

import structlog

from pgp_workflow.config import WorkflowConfig
from pgp_workflow.crypto.pgpy_backend import PgpyBackend
from pgp_workflow.crypto.protocol import CryptoProvider
from pgp_workflow.exceptions import UnlockError
from pgp_workflow.models.armor import ArmorClass
from pgp_workflow.models.key import KeyKind
from pgp_workflow.models.operation import Mode, Operation
from pgp_workflow.models.state import WorkflowState
from pgp_workflow.services.armor_classifier import classify
from pgp_workflow.services.key_session import KeySession
from pgp_workflow.services.mode_resolver import allowed_modes, resolve
from pgp_workflow.services.orchestrator import OperationOrchestrator

logger = structlog.get_logger(__name__)

Subscriber = Callable[[WorkflowState], None]


class PGPWorkflow:
    """
    Paste a key and a message; the workflow picks encrypt, decrypt, sign or verify.

    Commands return immediately and must be called from a running event loop.
    Results are delivered to subscribers as `WorkflowState` snapshots.
    A subscriber that raises is logged and skipped; other subscribers still run.

    Example:
        ```python
        async with PGPWorkflow() as workflow:
            workflow.subscribe(lambda state: print(state.mode, state.output))

            workflow.set_key_text(armored_private_key)
            await workflow.wait_idle()

            workflow.submit_passphrase("correct horse")
            workflow.set_message_text(armored_ciphertext)
            await workflow.wait_idle()

            print(workflow.state.output)
        ```

    Args:
        provider: Crypto capability provider. Uses PgpyBackend if not provided.
        config: Workflow configuration. Uses defaults if not provided.
    """

    def __init__(
        self,
        provider: CryptoProvider | None = None,
        config: WorkflowConfig | None = None,
    ) -> None:
        self._config = config or WorkflowConfig()
        self._provider = provider if provider is not None else PgpyBackend()

        self._key_text = ""
        self._key_session = KeySession(self._provider)
        self._message_text = ""
        self._message_class = ArmorClass.NONE
        self._manual_mode: Mode | None = None
        self._operation: Operation | None = None

        self._orchestrator = OperationOrchestrator(
            self._provider, self._on_operation, self._config
        )
        self._subscribers: list[Subscriber] = []
        self._tasks: set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        await self.close()

    @property
    def key_session(self) -> KeySession:
        return self._key_session

    @property
    def message_text(self) -> str:
        return self._message_text

    @property
    def mode(self) -> Mode:
        """Manual override if set, else the mode resolved from key and message."""
        if self._manual_mode is not None:
            return self._manual_mode
        return resolve(self._key_session.kind, self._message_class)

    @property
    def state(self) -> WorkflowState:
        return WorkflowState(
            mode=self.mode,
            message_class=self._message_class,
            manual_mode=self._manual_mode,
            key=self._key_session.summary(),
            operation=self._operation,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register `callback` to receive a snapshot after every state change.

        Returns:
            A function that unregisters the callback.
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def set_key_text(self, text: str) -> None:
        """
        Replace the key input. The previous session is cleared and a new one parsed.
        """
        if text == self._key_text:
            return
        self._key_text = text

        previous = self._key_session
        self._key_session = KeySession(self._provider)
        previous.clear()
        self._manual_mode = None
        self._orchestrator.invalidate()
        self._spawn(self._load_key(self._key_session, text))

    def set_message_text(self, text: str) -> None:
        """
        Replace the message input. The crypto call is debounced.

        A change of armor class drops any manual mode override.
        """
        if text == self._message_text:
            return
        self._message_text = text

        message_class = classify(text)
        if message_class is not self._message_class:
            self._manual_mode = None
        self._message_class = message_class
        self._refresh(debounce=True)

    def submit_passphrase(self, passphrase: str) -> None:
        """
        Unlock the current private key. The latest submission wins.

        Raises:
            ValueError: If no locked private key is loaded.
        """
        session = self._key_session
        if session.kind is not KeyKind.PRIVATE_LOCKED:
            msg = "No locked private key to unlock"
            raise ValueError(msg)
        self._spawn(self._unlock(session, passphrase))

    def switch_mode_manually(self, mode: Mode | None) -> None:
        """
        Override the resolved mode, e.g. encrypt with the public half of a private key.

        The override holds until the message armor class changes or the key is
        replaced. Pass None to return to the resolved mode.

        Raises:
            ValueError: If the loaded key cannot run `mode`.
        """
        kind = self._key_session.kind
        if mode is not None and mode not in allowed_modes(kind):
            msg = f"Mode {mode.value} is not available with a {kind.value} key"
            raise ValueError(msg)
        if mode == self._manual_mode:
            return
        logger.debug("Manual mode switch", mode=mode.value if mode is not None else None)
        self._manual_mode = mode
        self._refresh()

    def clear(self) -> None:
        """Discard the key, including unlocked material, and abandon pending work."""
        self._key_text = ""
        self._key_session.clear()
        self._manual_mode = None
        self._orchestrator.invalidate()

    async def wait_idle(self) -> None:
        """Wait until no parse, unlock or crypto call is left in flight."""
        while self._tasks or self._orchestrator.has_pending:
            if self._tasks:
                await asyncio.gather(*self._tasks)
            await self._orchestrator.wait_idle()

    async def close(self) -> None:
        """Clear key material and wait for background work to settle."""
        self.clear()
        await self.wait_idle()
        self._subscribers.clear()

    async def _load_key(self, session: KeySession, text: str) -> None:
        if self._config.key_parse_delay_seconds > 0:
            await asyncio.sleep(self._config.key_parse_delay_seconds)
        if session is not self._key_session:
            return
        await session.load(text)
        if session is not self._key_session:
            return
        self._refresh()

    async def _unlock(self, session: KeySession, passphrase: str) -> None:
        try:
            honored = await session.unlock(passphrase)
        except UnlockError:
            if session is self._key_session:
                self._notify()
            return
        except ValueError:
            logger.debug("Unlock skipped, key no longer locked", kind=session.kind.value)
            return

        if not honored or session is not self._key_session:
            return
        if not self._orchestrator.resume(session):
            self._notify()

    def _refresh(self, *, debounce: bool = False) -> None:
        self._orchestrator.submit(
            self.mode, self._key_session, self._message_text, debounce=debounce
        )

    def _on_operation(self, operation: Operation | None) -> None:
        self._operation = operation
        self._notify()

    def _notify(self) -> None:
        state = self.state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                logger.exception(
                    "Subscriber failed",
                    callback=getattr(callback, "__qualname__", repr(callback)),
                )

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

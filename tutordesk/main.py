"""
Main entry point for Tutordesk.
"""

import asyncio
import uuid
from typing import Any, Dict, Optional

from .api.rest_api import ClassesRestAPI
from .config import TutordeskSettings, load_settings
from .core.enums import CountdownState
from .core.exceptions import StateTransitionError, TutordeskException, ValidationError
from .core.interfaces import DeleteEndpoint, ProfileStore
from .persistence import CountdownStoreAdapter, FileProfileStore, ProfileStoreFactory
from .services import (
    CountdownController, CountdownToast, CountdownView, CrossTabSynchronizer,
    DeleteExecutor, HttpDeleteEndpoint, RefreshBus,
)
from .utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


class DashboardSession:
    """One dashboard session ("tab") attached to the profile store."""

    def __init__(self, controller: CountdownController, synchronizer: CrossTabSynchronizer):
        self.controller = controller
        self.synchronizer = synchronizer

    @property
    def session_id(self) -> str:
        return self.controller.session_id

    def view(self) -> CountdownView:
        return self.controller.snapshot()

    def toast(self) -> Optional[CountdownToast]:
        return CountdownToast.from_view(self.controller.snapshot())

    def close(self) -> None:
        self.synchronizer.detach()
        self.controller.close()


class TutordeskPlatform:
    """Wires the profile store, refresh bus and delete endpoint into sessions."""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 store: Optional[ProfileStore] = None,
                 endpoint: Optional[DeleteEndpoint] = None,
                 refresh_bus: Optional[RefreshBus] = None):
        self._settings = load_settings(config)
        configure_logging(self._settings.log_level, self._settings.log_file)

        self._store = store or self._create_store(self._settings)
        self._endpoint = endpoint or HttpDeleteEndpoint(
            self._settings.api_base_url,
            token=self._settings.api_token,
            timeout=self._settings.request_timeout_seconds,
        )
        self._refresh_bus = refresh_bus or RefreshBus()
        self._sessions: Dict[str, DashboardSession] = {}
        self._watch_task: Optional[asyncio.Task] = None
        logger.info("Tutordesk platform initialized (store=%s)", type(self._store).__name__)

    @staticmethod
    def _create_store(settings: TutordeskSettings) -> ProfileStore:
        if settings.store_type == "file":
            return ProfileStoreFactory.create_store("file", path=settings.store_path)
        return ProfileStoreFactory.create_store(settings.store_type)

    @property
    def settings(self) -> TutordeskSettings:
        return self._settings

    @property
    def store(self) -> ProfileStore:
        return self._store

    @property
    def refresh_bus(self) -> RefreshBus:
        return self._refresh_bus

    async def open_session(self, session_id: Optional[str] = None, clock=None) -> DashboardSession:
        """Attach a new session and restore any countdown left in the store."""
        session_id = session_id or str(uuid.uuid4())
        adapter = CountdownStoreAdapter(self._store, session_id=session_id)
        controller = CountdownController(
            adapter,
            DeleteExecutor(self._endpoint, self._refresh_bus),
            default_duration_seconds=self._settings.default_duration_seconds,
            tick_interval_seconds=self._settings.tick_interval_seconds,
            clock=clock,
            session_id=session_id,
        )
        synchronizer = CrossTabSynchronizer(self._store, session_id)
        synchronizer.attach(controller.apply_remote)

        session = DashboardSession(controller, synchronizer)
        self._sessions[session_id] = session
        self._start_watching()
        await controller.restore()
        logger.info("Session %s opened", session_id)
        return session

    def close_session(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session:
            session.close()
        if not self._sessions:
            self._stop_watching()

    def _start_watching(self) -> None:
        if not isinstance(self._store, FileProfileStore) or self._watch_task:
            return
        self._watch_task = asyncio.get_running_loop().create_task(
            self._store.watch(self._settings.store_poll_interval_seconds)
        )

    def _stop_watching(self) -> None:
        if self._watch_task:
            self._watch_task.cancel()
            self._watch_task = None

    def shutdown(self) -> None:
        for session_id in list(self._sessions):
            self.close_session(session_id)
        self._stop_watching()
        if isinstance(self._endpoint, HttpDeleteEndpoint):
            self._endpoint.close()


async def run_delete(platform: TutordeskPlatform, class_id: str, scope: str,
                     message: Optional[str] = None, duration: Optional[float] = None,
                     undo_after: Optional[float] = None) -> CountdownView:
    """Run one countdown to a terminal state, printing the toast as it changes."""
    session = await platform.open_session()
    controller = session.controller
    last_line = {"text": None}

    def show(view: CountdownView) -> None:
        toast = CountdownToast.from_view(view)
        text = toast.headline if toast else "No pending deletion"
        if text != last_line["text"]:
            print(text)
            last_line["text"] = text

    controller.add_observer("cli", show)
    try:
        # A restored countdown for another class keeps the session busy.
        pending = controller.record
        if not controller.start(class_id, scope, message, duration):
            if pending.active:
                raise StateTransitionError(
                    f"Class {pending.target_id} is already pending deletion "
                    f"({pending.scope.value}); class {class_id} was not scheduled",
                    error_code="countdown_busy",
                    details={'pending_target_id': pending.target_id, 'requested_target_id': class_id},
                )
            raise ValidationError(f"Class {class_id!r} was not scheduled", error_code="invalid_request")
        loop = asyncio.get_running_loop()
        started = loop.time()
        while controller.state in (CountdownState.PENDING, CountdownState.EXECUTING):
            if undo_after is not None and loop.time() - started >= undo_after:
                controller.undo()
                break
            await asyncio.sleep(platform.settings.tick_interval_seconds)
        return controller.snapshot()
    finally:
        platform.close_session(session.session_id)


def main():
    """Main entry point."""
    import argparse
    import json

    parser = argparse.ArgumentParser(description="Tutordesk tutoring dashboard")
    parser.add_argument("--config", type=str, help="Configuration file path (JSON)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the reference classes API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    delete = subparsers.add_parser("delete", help="Delete a class after an undoable countdown")
    delete.add_argument("class_id")
    delete.add_argument("--scope", choices=["single", "series"], default="single")
    delete.add_argument("--message", default=None)
    delete.add_argument("--duration", type=float, default=None, help="Countdown length in seconds")
    delete.add_argument("--undo-after", type=float, default=None, help="Cancel after N seconds")

    args = parser.parse_args()

    # Load configuration
    config = {}
    if args.config:
        with open(args.config, 'r') as f:
            config = json.load(f)

    if args.command == "serve":
        import uvicorn

        settings = load_settings(config)
        configure_logging(settings.log_level, settings.log_file)
        rest_api = ClassesRestAPI()
        uvicorn.run(rest_api.app, host=args.host, port=args.port, log_level=settings.log_level.lower())
        return

    platform = TutordeskPlatform(config)
    try:
        view = asyncio.run(run_delete(
            platform, args.class_id, args.scope, args.message, args.duration, args.undo_after
        ))
    except KeyboardInterrupt:
        print("\nShutting down...")
        return
    except TutordeskException as e:
        print(f"Error: {e.message}")
        raise SystemExit(1)
    finally:
        platform.shutdown()
    if view.error:
        raise SystemExit(1)


if __name__ == "__main__":
    main()

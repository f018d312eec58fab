"""
Background workers for the settings window.
"""

from functools import partial
from typing import Any, Callable, Dict, List

from PyQt6.QtCore import QThread, pyqtSignal

from ...core.api.settings_client import SettingsApiClient
from ...utils.logging_setup import get_logger

logger = get_logger(__name__)


class AutoconfigWorker(QThread):
    """Worker thread for account autoconfiguration."""

    probe_completed = pyqtSignal(object)  # response dict

    def __init__(self, client: SettingsApiClient, payload: Dict[str, str]):
        super().__init__()
        self.client = client
        self.payload = payload

    def run(self):
        """Run the autoconfiguration request."""
        try:
            result = self.client.autoconfigure_account(
                self.payload["username"], self.payload["password"]
            )
        except Exception as e:
            logger.error(f"Autoconfiguration worker failed: {e}")
            result = {
                "connected": False,
                "settings": {},
                "error_message": str(e),
                "error_type": "connection",
            }
        self.probe_completed.emit(result)


class QtProbeLauncher:
    """
    Starts autoconfiguration on a worker thread.

    The callback is connected to the worker's signal from the GUI thread, so
    results are delivered back on the GUI thread.
    """

    def __init__(self, client: SettingsApiClient):
        self.client = client
        self.workers: List[AutoconfigWorker] = []

    def __call__(self, payload: Dict[str, str],
                 callback: Callable[[Dict[str, Any]], None]) -> None:
        worker = AutoconfigWorker(self.client, payload)
        worker.probe_completed.connect(callback)
        worker.finished.connect(partial(self._forget, worker))
        # Keep a reference until the thread is done
        self.workers.append(worker)
        worker.start()

    def _forget(self, worker: AutoconfigWorker) -> None:
        if worker in self.workers:
            self.workers.remove(worker)
        worker.deleteLater()

    def wait(self, msecs: int = 5000) -> None:
        """Block until any running workers finish."""
        for worker in list(self.workers):
            worker.wait(msecs)

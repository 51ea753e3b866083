import threading
from typing import List


class Dispatcher:
    """Fans events out to every connection registered for the session.

    The registry is explicit: connections are added on connect and removed on
    disconnect, and a broadcast emits to each sid in turn rather than relying
    on Socket.IO rooms.
    """

    def __init__(self, socketio, namespace='/', logger=None):
        self.socketio = socketio
        self.namespace = namespace
        self.logger = logger
        self._lock = threading.Lock()
        self._sids: List[str] = []

    def register(self, sid) -> None:
        with self._lock:
            if sid not in self._sids:
                self._sids.append(sid)

    def unregister(self, sid) -> None:
        with self._lock:
            if sid in self._sids:
                self._sids.remove(sid)

    def connections(self) -> List[str]:
        with self._lock:
            return list(self._sids)

    def send(self, sid, event, payload) -> None:
        # Wrapped so a None view still goes out as an explicit null argument
        self.socketio.emit(event, (payload,), to=sid, namespace=self.namespace)

    def broadcast(self, event, payload, skip_sid=None) -> int:
        sids = [s for s in self.connections() if s != skip_sid]
        for sid in sids:
            self.send(sid, event, payload)
        return len(sids)

    def update(self, view) -> None:
        count = self.broadcast('game:update', view)
        if self.logger is not None:
            state = view['state'] if view else None
            self.logger.debug(f"[broadcast] state={state} connections={count}")

    def error(self, sid, message) -> None:
        self.send(sid, 'game:error', message)

    def ended(self, message, sid=None, skip_sid=None) -> None:
        if sid is None:
            self.broadcast('game:ended', message, skip_sid=skip_sid)
        else:
            self.send(sid, 'game:ended', message)

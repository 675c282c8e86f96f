"""Concurrent callers sharing one handle and one cache key."""
import threading

from asapi.core.authorize import AuthorizeHandle, StaffService
from asapi.core.authorize.models import UserCodeResult, encode_payload
from asapi.core.authorize.readers import ROUTER_USER_CODE, GetUserCodeRequest

WORKERS = 50


class BarrierTransport:
    """Holds every request until all workers are inside send()."""

    def __init__(self, parties):
        self.barrier = threading.Barrier(parties, timeout=5)
        self.calls = 0
        self._lock = threading.Lock()

    def send(self, req):
        with self._lock:
            self.calls += 1
        self.barrier.wait()
        return 200, b'{"UserCode": "S1"}'

    def close(self):
        pass


def test_simultaneous_misses_all_succeed(make_config, token_handle, clock):
    transport = BarrierTransport(WORKERS)
    handle = AuthorizeHandle(make_config(), token_handle=token_handle, transport=transport, clock=clock)
    service = StaffService(handle)
    results = []
    errors = []
    lock = threading.Lock()

    def worker():
        try:
            outcome = service.get_user_code("u1")
        except Exception as e:
            with lock:
                errors.append(e)
            return
        with lock:
            results.append(outcome)

    try:
        threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert results == [("S1", None)] * WORKERS
        # Every caller missed and went to the service; the last write wins
        assert transport.calls == WORKERS
        cached = handle.get_from_router_cache(ROUTER_USER_CODE, GetUserCodeRequest(uid="u1"))
        assert cached == encode_payload(UserCodeResult(user_code="S1"))
    finally:
        handle.close()


def test_cached_key_served_to_many_threads(handle, transport):
    transport.respond(200, {"UserCode": "S1"})
    service = StaffService(handle)
    assert service.get_user_code("u1") == ("S1", None)

    results = []
    lock = threading.Lock()

    def worker():
        outcome = service.get_user_code("u1")
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results == [("S1", None)] * WORKERS
    assert transport.call_count == 1

from timekeeper.core.middleware import RateLimitingMiddleware


def _limiter():
    return RateLimitingMiddleware(app=lambda scope, receive, send: None, requests_per_minute=5)


def test_prune_forgets_expired_windows():
    limiter = _limiter()
    limiter.windows = {"10.0.0.1": [0.0, 5], "10.0.0.2": [50.0, 2]}

    limiter.prune(now=70.0)

    assert list(limiter.windows) == ["10.0.0.2"]
    assert limiter.last_prune == 70.0


def test_prune_keeps_live_windows():
    limiter = _limiter()
    limiter.windows = {"10.0.0.1": [100.0, 1]}

    limiter.prune(now=130.0)

    assert limiter.windows == {"10.0.0.1": [100.0, 1]}

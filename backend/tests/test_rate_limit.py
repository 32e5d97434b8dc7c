from unittest.mock import MagicMock, patch

from app.middleware import rate_limit
from app.middleware.rate_limit import check_limit


def fake_redis(count, ttl):
    redis = MagicMock()
    redis.pipeline.return_value.execute.return_value = [count, ttl]
    return redis


def test_first_hit_sets_window():
    redis = fake_redis(1, -1)
    with patch.object(rate_limit, "redis_client", redis):
        assert check_limit("rl:ip:1.2.3.4", 10, 60) == (True, None)

    redis.expire.assert_called_once_with("rl:ip:1.2.3.4", 60)


def test_over_limit_reports_retry_after():
    with patch.object(rate_limit, "redis_client", fake_redis(11, 42)):
        assert check_limit("rl:ip:1.2.3.4", 10, 60) == (False, 42)


def test_redis_failure_fails_open():
    redis = MagicMock()
    redis.pipeline.return_value.execute.side_effect = ConnectionError("refused")
    with patch.object(rate_limit, "redis_client", redis):
        assert check_limit("rl:ip:1.2.3.4", 10, 60) == (True, None)


def test_zero_limit_disables_check():
    redis = MagicMock()
    with patch.object(rate_limit, "redis_client", redis):
        assert check_limit("rl:ip:1.2.3.4", 0, 60) == (True, None)

    redis.pipeline.assert_not_called()


def test_middleware_returns_429(client):
    with patch.object(rate_limit.settings, "rate_limit_enabled", True), \
            patch.object(rate_limit, "check_limit", return_value=(False, 12)):
        resp = client.get("/bookings/1")

    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "12"
    assert resp.json()["code"] == "RATE_LIMIT_EXCEEDED"


def test_health_is_exempt(client):
    with patch.object(rate_limit.settings, "rate_limit_enabled", True), \
            patch.object(rate_limit, "check_limit", return_value=(False, 12)), \
            patch("app.main.redis_client"):
        resp = client.get("/health")

    assert resp.status_code == 200

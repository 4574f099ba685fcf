import pytest

from slowq_explain.config import Settings, _env_flag


@pytest.mark.parametrize(
    "uri,expected",
    [
        ("mongodb://localhost:27017/shop", "shop"),
        ("mongodb://user:pw@db1,db2/analytics?replicaSet=rs0", "analytics"),
        ("mongodb://localhost:27017", "studio3t_profiler"),
        ("mongodb://localhost:27017/", "studio3t_profiler"),
        ("mongodb://localhost", "studio3t_profiler"),
    ],
)
def test_database_name_from_uri(uri, expected):
    assert Settings(mongodb_uri=uri).database_name == expected


def test_env_flag(monkeypatch):
    monkeypatch.setenv("SLOWQ_TEST_FLAG", "off")
    assert _env_flag("SLOWQ_TEST_FLAG", default=True) is False
    monkeypatch.setenv("SLOWQ_TEST_FLAG", "YES")
    assert _env_flag("SLOWQ_TEST_FLAG", default=False) is True
    monkeypatch.setenv("SLOWQ_TEST_FLAG", "maybe")
    assert _env_flag("SLOWQ_TEST_FLAG", default=True) is True

"""
Tests for injected platform capabilities.
"""

from common.capabilities import CallbackPantryRefresh, NoopPantryRefresh, PantryRefresh


def test_noop_refresh_is_unavailable():
    """Test the no-op capability reports itself unavailable."""
    refresh = NoopPantryRefresh()

    assert isinstance(refresh, PantryRefresh)
    assert not refresh.available
    refresh.refresh()


def test_callback_refresh_invokes_callback():
    """Test the callback adapter forwards refresh calls."""
    calls = []
    refresh = CallbackPantryRefresh(lambda: calls.append("refreshed"))

    assert isinstance(refresh, PantryRefresh)
    assert refresh.available
    refresh.refresh()
    assert calls == ["refreshed"]


def test_callback_refresh_without_callback():
    """Test a missing callback behaves like the no-op capability."""
    refresh = CallbackPantryRefresh(None)

    assert not refresh.available
    refresh.refresh()

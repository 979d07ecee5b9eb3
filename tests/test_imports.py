"""Smoke tests: all public modules are importable."""


def test_browser_imports():
    from browser_kit.browser import (
        BrowserLauncher,
        find_system_chrome,
        Session,
        close_browser,
        StealthProfile,
        random_profile,
        build_stealth_shim,
        apply_stealth,
        build_user_agent,
        pick_user_agent,
    )
    assert callable(BrowserLauncher)
    assert callable(find_system_chrome)
    assert callable(Session)
    assert callable(close_browser)
    assert callable(StealthProfile)
    assert callable(random_profile)
    assert callable(build_stealth_shim)
    assert callable(apply_stealth)
    assert callable(build_user_agent)
    assert callable(pick_user_agent)


def test_human_imports():
    from browser_kit.human import HumanizationPolicy, RandomDelays, NoDelays, human_type
    assert callable(RandomDelays)
    assert callable(NoDelays)
    assert callable(human_type)
    assert HumanizationPolicy is not None


def test_telemetry_imports():
    from browser_kit.telemetry import SessionEventLogger
    assert callable(SessionEventLogger)


def test_engine_imports():
    from browser_kit.engine import (
        ErrorKind,
        BrowserKitError,
        SessionNotFound,
        SessionRegistry,
        SessionManager,
        RetryPolicy,
        navigate_with_retry,
    )
    assert ErrorKind.SESSION_NOT_FOUND.value == "session_not_found"
    assert issubclass(SessionNotFound, BrowserKitError)
    assert callable(SessionRegistry)
    assert callable(SessionManager)
    assert callable(RetryPolicy)
    assert callable(navigate_with_retry)


def test_server_imports():
    from browser_kit.server import create_app, build_app
    from browser_kit.__main__ import main
    assert callable(create_app)
    assert callable(build_app)
    assert callable(main)

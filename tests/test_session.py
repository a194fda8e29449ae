from school_portal.modules.auth.schemas import AuthEvent, GuardState
from school_portal.modules.auth.session import Location, RouteGuard, on_auth_event, on_mount


def test_location_parsing():
    location = Location.from_url("https://school.ac.th/dashboard?code=abc&next=1#section")

    assert location.path == "/dashboard"
    assert location.param("code") == "abc"
    assert location.has_auth_code
    assert not location.has_auth_error
    assert location.without_fragment() == "/dashboard?code=abc&next=1"


def test_signed_in_with_token_fragment_strips_it_and_goes_to_dashboard():
    location = Location.from_url("https://school.ac.th/#access_token=jwt&refresh_token=r")

    decision = on_auth_event(AuthEvent.SIGNED_IN, location)

    assert decision.replace_url == "/"
    assert decision.redirect_to == "/dashboard"


def test_signed_in_inside_dashboard_stays_put():
    decision = on_auth_event(AuthEvent.SIGNED_IN, Location.from_url("/dashboard/admin"))

    assert decision.replace_url is None
    assert decision.redirect_to is None


def test_signed_out_goes_to_public_root():
    assert on_auth_event(AuthEvent.SIGNED_OUT, Location.from_url("/dashboard")).redirect_to == "/"
    assert on_auth_event(AuthEvent.SIGNED_OUT, Location.from_url("/")).redirect_to is None


def test_other_events_do_nothing():
    decision = on_auth_event(AuthEvent.TOKEN_REFRESHED, Location.from_url("/news"))

    assert decision.replace_url is None
    assert decision.redirect_to is None


def test_mount_with_code_waits_for_exchange_and_never_redirects_on_failure():
    location = Location.from_url("/?code=abc")

    assert on_mount(location).redirect_to is None
    failed = on_mount(location, exchanged_session=False)
    assert failed.redirect_to is None
    assert failed.replace_url is None


def test_failed_exchange_still_honours_an_existing_session_on_root():
    decision = on_mount(Location.from_url("/?code=stale"), exchanged_session=False, has_session=True)

    assert decision.redirect_to == "/dashboard"
    assert decision.replace_url is None


def test_mount_with_exchanged_code_drops_query_and_goes_to_dashboard():
    decision = on_mount(Location.from_url("/?code=abc"), exchanged_session=True)

    assert decision.replace_url == "/"
    assert decision.redirect_to == "/dashboard"


def test_mount_with_error_param_ignores_code():
    decision = on_mount(Location.from_url("/?code=abc&error=access_denied"), has_session=False)

    assert decision.redirect_to is None


def test_mount_with_session_on_root_goes_to_dashboard():
    assert on_mount(Location.from_url("/"), has_session=True).redirect_to == "/dashboard"
    assert on_mount(Location.from_url("/news"), has_session=True).redirect_to is None
    assert on_mount(Location.from_url("/"), has_session=False).redirect_to is None


def test_guard_with_session_is_authenticated():
    guard = RouteGuard()

    assert guard.start(Location.from_url("/dashboard"), has_session=True) == GuardState.AUTHENTICATED
    assert guard.redirect_to is None


def test_guard_without_session_or_handshake_redirects_home():
    guard = RouteGuard()

    assert guard.start(Location.from_url("/dashboard"), has_session=False) == GuardState.REDIRECTING
    assert guard.redirect_to == "/"


def test_guard_keeps_checking_during_handshake():
    guard = RouteGuard()

    state = guard.start(Location.from_url("/dashboard#access_token=jwt"), has_session=False)

    assert state == GuardState.CHECKING
    assert guard.redirect_to is None
    assert not guard.settled
    assert guard.on_auth_event(AuthEvent.INITIAL_SESSION, has_session=False) == GuardState.CHECKING
    assert guard.on_auth_event(AuthEvent.SIGNED_IN, has_session=True) == GuardState.AUTHENTICATED


def test_settled_guard_does_not_change():
    guard = RouteGuard()
    guard.start(Location.from_url("/dashboard"), has_session=False)

    assert guard.on_auth_event(AuthEvent.SIGNED_IN, has_session=True) == GuardState.REDIRECTING
    assert guard.start(Location.from_url("/dashboard"), has_session=True) == GuardState.REDIRECTING

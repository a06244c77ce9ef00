from fakes import FakePermissionRepo
from timeclock.permissions.service import PermissionService


class FakeTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _service(timer=None):
    repo = FakePermissionRepo(
        roles={"mgr": "manager", "alice": "user", "root": "admin"},
        permissions={"manager": {"attendance_management", "view_projects"}, "user": set()},
    )
    return repo, PermissionService(repo, ttl_seconds=300, timer=timer or FakeTimer())


def test_role_permissions_resolve_through_user_role():
    _, service = _service()

    assert service.has_permission("mgr", "attendance_management")
    assert not service.has_permission("alice", "attendance_management")


def test_admin_holds_every_permission():
    _, service = _service()

    assert service.has_permission("root", "anything_at_all")


def test_user_without_role_has_no_permissions():
    _, service = _service()

    assert not service.has_permission("stranger", "attendance_management")


def test_role_lookups_are_cached_until_ttl_expires():
    timer = FakeTimer()
    repo, service = _service(timer)

    service.has_permission("mgr", "attendance_management")
    service.has_permission("mgr", "view_projects")
    assert repo.permission_lookups == 1

    timer.now = 299
    service.has_permission("mgr", "attendance_management")
    assert repo.permission_lookups == 1

    timer.now = 301
    service.has_permission("mgr", "attendance_management")
    assert repo.permission_lookups == 2


def test_clear_cache_forces_reload():
    repo, service = _service()
    service.has_permission("mgr", "attendance_management")

    repo.permissions["manager"].discard("attendance_management")
    assert service.has_permission("mgr", "attendance_management")

    service.clear_cache()
    assert not service.has_permission("mgr", "attendance_management")

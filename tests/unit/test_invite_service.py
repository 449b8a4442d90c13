"""Unit tests for InviteService."""

import string
from datetime import datetime, timedelta, timezone

import pytest

from src.api.middleware.error_handler import (
    AlreadyProcessedError,
    DuplicateInviteError,
    EmailMismatchError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)
from src.models.invite import InviteStatus, InviteType
from src.services.invite_service import INVITES, USERS, InviteService, generate_invite_code
from tests.fakes import FakeAuthProvider, FakeDocumentStore, FakeEmailService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth() -> FakeAuthProvider:
    auth = FakeAuthProvider()
    auth.add_user("admin-1", "admin@thikabizhub.co.ke", role="admin", display_name="Wanjiku")
    auth.add_user("user-2", "bob@example.com")
    return auth


@pytest.fixture
def service(
    fake_store: FakeDocumentStore,
    auth: FakeAuthProvider,
    fake_email: FakeEmailService,
    clock: FakeClock,
) -> InviteService:
    return InviteService(store=fake_store, auth=auth, email_service=fake_email, clock=clock)


class TestGenerateInviteCode:
    """Tests for generate_invite_code."""

    def test_code_shape(self) -> None:
        """Test codes are 26 lowercase base-36 characters."""
        code = generate_invite_code()

        assert len(code) == 26
        assert set(code) <= set(string.digits + string.ascii_lowercase)

    def test_codes_differ(self) -> None:
        """Test successive codes are distinct."""
        assert len({generate_invite_code() for _ in range(50)}) == 50


class TestCreateInvite:
    """Tests for create_invite."""

    @pytest.mark.asyncio
    async def test_creates_pending_invite(self, service: InviteService, fake_email: FakeEmailService) -> None:
        """Test a new invite is stored pending with a seven-day expiry and emailed."""
        created = await service.create_invite("admin-1", "Bob@Example.com", "admin", message="Join us")

        invite = created.invite
        assert invite.status == InviteStatus.PENDING
        assert invite.type == InviteType.ADMIN
        assert invite.invitee_email == "bob@example.com"
        assert invite.inviter_name == "Wanjiku"
        assert invite.expires_at == NOW + timedelta(days=7)
        assert created.invite_link == f"http://localhost:3000/invite/{invite.invite_code}"
        assert created.email_sent is True

        assert len(fake_email.sent) == 1
        assert fake_email.sent[0]["to_email"] == "bob@example.com"
        assert fake_email.sent[0]["invite_link"] == created.invite_link

    @pytest.mark.asyncio
    async def test_email_failure_does_not_fail_create(
        self, fake_store: FakeDocumentStore, auth: FakeAuthProvider, clock: FakeClock
    ) -> None:
        """Test the invite is kept when the email could not be sent."""
        service = InviteService(store=fake_store, auth=auth, email_service=FakeEmailService(succeed=False), clock=clock)

        created = await service.create_invite("admin-1", "bob@example.com", "user")

        assert created.email_sent is False
        assert len(fake_store.rows(INVITES)) == 1

    @pytest.mark.asyncio
    async def test_rejects_duplicate_pending_invite(self, service: InviteService) -> None:
        """Test a second pending invite for the same triple is refused."""
        await service.create_invite("admin-1", "bob@example.com", "business", business_name="Mama Mboga")

        with pytest.raises(DuplicateInviteError):
            await service.create_invite("admin-1", "BOB@example.com", "business")

    @pytest.mark.asyncio
    async def test_allows_different_type(self, service: InviteService) -> None:
        """Test the duplicate check is scoped to the invite type."""
        await service.create_invite("admin-1", "bob@example.com", "user")
        await service.create_invite("admin-1", "bob@example.com", "admin")

    @pytest.mark.asyncio
    async def test_allows_reinvite_after_expiry(self, service: InviteService, clock: FakeClock) -> None:
        """Test an expired pending invite does not block a new one."""
        await service.create_invite("admin-1", "bob@example.com", "user")
        clock.now = NOW + timedelta(days=8)

        created = await service.create_invite("admin-1", "bob@example.com", "user")

        assert created.invite.expires_at == clock.now + timedelta(days=7)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("email", "invite_type"),
        [("", "user"), ("bob@example.com", ""), ("bob@example.com", "superuser")],
    )
    async def test_validates_input(self, service: InviteService, email: str, invite_type: str) -> None:
        """Test missing email, missing type and unknown type are rejected."""
        with pytest.raises(ValidationError):
            await service.create_invite("admin-1", email, invite_type)


class TestGetInviteByCode:
    """Tests for get_invite_by_code."""

    @pytest.mark.asyncio
    async def test_returns_pending_invite(self, service: InviteService) -> None:
        """Test a pending invite can be previewed."""
        created = await service.create_invite("admin-1", "bob@example.com", "user")

        invite = await service.get_invite_by_code(created.invite.invite_code)

        assert invite.id == created.invite.id

    @pytest.mark.asyncio
    async def test_unknown_code(self, service: InviteService) -> None:
        """Test an unknown code is not found."""
        with pytest.raises(NotFoundError):
            await service.get_invite_by_code("does-not-exist")

    @pytest.mark.asyncio
    async def test_expired_invite(self, service: InviteService, clock: FakeClock) -> None:
        """Test an invite past its expiry cannot be previewed."""
        created = await service.create_invite("admin-1", "bob@example.com", "user")
        clock.now = NOW + timedelta(days=7, seconds=1)

        with pytest.raises(ExpiredError):
            await service.get_invite_by_code(created.invite.invite_code)


class TestAcceptInvite:
    """Tests for accept_invite."""

    @pytest.mark.asyncio
    async def test_admin_invite_grants_admin(
        self, service: InviteService, auth: FakeAuthProvider, fake_store: FakeDocumentStore
    ) -> None:
        """Test accepting an admin invite from an admin grants the role."""
        created = await service.create_invite("admin-1", "bob@example.com", "admin")

        accepted = await service.accept_invite(created.invite.invite_code, "user-2", "bob@example.com")

        assert accepted.admin_granted is True
        assert accepted.invite.status == InviteStatus.ACCEPTED
        assert accepted.invite.accepted_by == "user-2"
        assert accepted.invite.accepted_at == NOW
        assert auth.users["user-2"].role == "admin"
        assert (await fake_store.get(USERS, "user-2"))["role"] == "admin"

    @pytest.mark.asyncio
    async def test_admin_invite_from_demoted_inviter(
        self, service: InviteService, auth: FakeAuthProvider
    ) -> None:
        """Test the inviter's current role decides whether admin is granted."""
        created = await service.create_invite("admin-1", "bob@example.com", "admin")
        auth.users["admin-1"].role = "user"

        accepted = await service.accept_invite(created.invite.invite_code, "user-2", "bob@example.com")

        assert accepted.admin_granted is False
        assert accepted.invite.status == InviteStatus.ACCEPTED
        assert auth.users["user-2"].role == "user"

    @pytest.mark.asyncio
    async def test_business_invite_sets_membership(
        self, service: InviteService, fake_store: FakeDocumentStore
    ) -> None:
        """Test accepting a business invite records membership on the profile."""
        fake_store.seed(USERS, "user-2", {"email": "bob@example.com", "role": "user"})
        created = await service.create_invite("admin-1", "bob@example.com", "business", business_name="Mama Mboga")

        await service.accept_invite(created.invite.invite_code, "user-2", "bob@example.com")

        profile = await fake_store.get(USERS, "user-2")
        assert profile["business_role"] == "member"
        assert profile["invited_to_business"] == "Mama Mboga"
        assert profile["joined_business_at"] == NOW.isoformat()

    @pytest.mark.asyncio
    async def test_user_invite_links_inviter(self, service: InviteService, fake_store: FakeDocumentStore) -> None:
        """Test accepting a user invite creates the profile link to the inviter."""
        created = await service.create_invite("admin-1", "bob@example.com", "user")

        await service.accept_invite(created.invite.invite_code, "user-2", "BOB@example.com")

        profile = await fake_store.get(USERS, "user-2")
        assert profile["invited_by"] == "admin-1"
        assert profile["joined_via_invite"] is True
        assert profile["email"] == "BOB@example.com"

    @pytest.mark.asyncio
    async def test_email_mismatch(self, service: InviteService) -> None:
        """Test only the addressed user may accept."""
        created = await service.create_invite("admin-1", "bob@example.com", "user")

        with pytest.raises(EmailMismatchError):
            await service.accept_invite(created.invite.invite_code, "user-3", "eve@example.com")

    @pytest.mark.asyncio
    async def test_second_accept_is_already_processed(self, service: InviteService) -> None:
        """Test an accepted invite cannot be accepted again."""
        created = await service.create_invite("admin-1", "bob@example.com", "user")
        await service.accept_invite(created.invite.invite_code, "user-2", "bob@example.com")

        with pytest.raises(AlreadyProcessedError):
            await service.accept_invite(created.invite.invite_code, "user-2", "bob@example.com")

    @pytest.mark.asyncio
    async def test_expiry_checked_before_status(
        self, service: InviteService, clock: FakeClock
    ) -> None:
        """Test an accepted invite that has since expired reports expiry."""
        created = await service.create_invite("admin-1", "bob@example.com", "user")
        await service.accept_invite(created.invite.invite_code, "user-2", "bob@example.com")
        clock.now = NOW + timedelta(days=30)

        with pytest.raises(ExpiredError):
            await service.accept_invite(created.invite.invite_code, "user-2", "bob@example.com")

    @pytest.mark.asyncio
    async def test_expiry_checked_before_email(self, service: InviteService, clock: FakeClock) -> None:
        """Test an expired invite reports expiry even for the wrong user."""
        created = await service.create_invite("admin-1", "bob@example.com", "user")
        clock.now = NOW + timedelta(days=8)

        with pytest.raises(ExpiredError):
            await service.accept_invite(created.invite.invite_code, "user-3", "eve@example.com")


class TestListInvites:
    """Tests for list_invites."""

    @pytest.mark.asyncio
    async def test_sent_received_and_stats(self, service: InviteService, clock: FakeClock) -> None:
        """Test sent and received invites are listed with sent stats."""
        first = await service.create_invite("admin-1", "bob@example.com", "user")
        clock.now = NOW + timedelta(minutes=1)
        await service.create_invite("admin-1", "carol@example.com", "user")
        await service.accept_invite(first.invite.invite_code, "user-2", "bob@example.com")

        sent = await service.list_invites("admin-1", "admin@thikabizhub.co.ke")
        received = await service.list_invites("user-2", "Bob@Example.com")

        assert [i.invitee_email for i in sent["sent"]] == ["carol@example.com", "bob@example.com"]
        assert sent["stats"] == {"total_sent": 2, "accepted": 1, "pending": 1}
        assert sent["received"] == []
        assert [i.id for i in received["received"]] == [first.invite.id]
        assert received["stats"]["total_sent"] == 0

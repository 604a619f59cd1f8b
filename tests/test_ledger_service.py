import pytest

from soundcoin.core.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from soundcoin.models.ledger import TransactionType
from soundcoin.models.profile import Profile as ProfileModel
from soundcoin.repositories.ledger_repository import LedgerRepository
from soundcoin.repositories.profile_repository import ProfileRepository
from soundcoin.services.ledger_service import LedgerService


@pytest.fixture
def ledger_service(db_session):
    return LedgerService(db_session, max_retries=3)


class TestLedgerService:
    """LedgerService 테스트 (SQLite)"""

    def test_credit_updates_balance_and_records_transaction(
        self, ledger_service, db_session, user_profile
    ):
        result = ledger_service.credit(
            user_profile.id, 5, description="Ad view reward", related_ad_id=None
        )

        assert result.balance == 5
        assert result.total_earned == 5
        assert result.balance_version == 1
        assert result.transaction.amount == 5
        assert result.transaction.balance_after == 5
        assert result.transaction.type == TransactionType.EARNED

        profile = ProfileRepository(db_session).get_by_id(user_profile.id)
        assert profile.coins == 5
        assert profile.balance_version == 1

    def test_debit_does_not_touch_total_earned(
        self, ledger_service, db_session, user_profile
    ):
        ledger_service.credit(user_profile.id, 10, description="bonus")

        result = ledger_service.debit(user_profile.id, 4, description="spend")

        assert result.balance == 6
        assert result.total_earned == 10
        assert result.transaction.amount == -4

    def test_overdraft_fails_without_mutation(
        self, ledger_service, db_session, user_profile
    ):
        ledger_service.credit(user_profile.id, 3, description="bonus")

        with pytest.raises(InsufficientBalanceError) as exc_info:
            ledger_service.debit(user_profile.id, 4, description="spend")

        assert exc_info.value.detail["error"] == "Insufficient coins"
        profile = ProfileRepository(db_session).get_by_id(user_profile.id)
        assert profile.coins == 3
        assert profile.balance_version == 1
        assert LedgerRepository(db_session).count_by_user(user_profile.id) == 1

    def test_unknown_profile(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.credit("ghost", 1, description="bonus")

    def test_zero_delta_rejected(self, ledger_service, user_profile):
        with pytest.raises(ValidationError):
            ledger_service.apply_delta(user_profile.id, 0, TransactionType.BONUS, "noop")

    def test_retries_after_version_conflict(
        self, ledger_service, db_session, user_profile, monkeypatch
    ):
        real_swap = ledger_service.profile_repo.compare_and_swap_balance
        calls = []

        def flaky(*args, **kwargs):
            calls.append(kwargs.get("expected_version"))
            if len(calls) == 1:
                return False
            return real_swap(*args, **kwargs)

        monkeypatch.setattr(
            ledger_service.profile_repo, "compare_and_swap_balance", flaky
        )

        result = ledger_service.credit(user_profile.id, 2, description="bonus")

        assert len(calls) == 2
        assert result.balance == 2
        assert LedgerRepository(db_session).count_by_user(user_profile.id) == 1

    def test_exhausted_retries_raise_conflict(
        self, ledger_service, db_session, user_profile, monkeypatch
    ):
        monkeypatch.setattr(
            ledger_service.profile_repo,
            "compare_and_swap_balance",
            lambda *args, **kwargs: False,
        )

        with pytest.raises(ConflictError):
            ledger_service.credit(user_profile.id, 2, description="bonus")

        assert LedgerRepository(db_session).count_by_user(user_profile.id) == 0

    def test_stale_version_is_rejected(self, db_session, user_profile):
        repo = ProfileRepository(db_session)
        assert repo.compare_and_swap_balance(user_profile.id, 0, 10, 10) is True
        db_session.commit()

        # 이미 버전이 1로 올라갔으므로 0을 기대한 갱신은 실패
        assert repo.compare_and_swap_balance(user_profile.id, 0, 99, 99) is False
        db_session.rollback()
        assert repo.get_by_id(user_profile.id).coins == 10

    def test_transactions_newest_first(self, ledger_service, user_profile):
        for coins in (1, 2, 3):
            ledger_service.credit(user_profile.id, coins, description=f"reward {coins}")

        page = ledger_service.get_transactions(user_profile.id, limit=2)

        assert [tx.amount for tx in page.transactions] == [3, 2]
        assert page.total_count == 3
        assert page.has_next is True
        assert page.balance == 6

    def test_integrity_ok_and_mismatch(self, ledger_service, db_session, user_profile):
        ledger_service.credit(user_profile.id, 7, description="bonus")
        assert ledger_service.verify_integrity(user_profile.id).status == "OK"

        db_session.query(ProfileModel).filter(
            ProfileModel.id == user_profile.id
        ).update({"coins": 100})
        db_session.commit()

        report = ledger_service.verify_integrity(user_profile.id)
        assert report.status == "MISMATCH"
        assert report.stored_balance == 100
        assert report.calculated_balance == 7
        assert report.difference == 93

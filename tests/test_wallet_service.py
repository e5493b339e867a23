import pytest
from decimal import Decimal
from unittest.mock import Mock, patch

from casinoapi.config import Settings
from casinoapi.core.exceptions import InsufficientBalanceError
from casinoapi.schemas.balance import BalanceBreakdown, BalanceOperationKind
from casinoapi.services.wallet_service import WalletService


@pytest.fixture
def mock_db():
    return Mock()


@pytest.fixture
def wallet_service(mock_db):
    with patch("casinoapi.services.wallet_service.BalanceEngine") as mock_engine_class:
        mock_engine = Mock()
        mock_engine_class.return_value = mock_engine

        service = WalletService(mock_db, Settings(HISTORY_DEFAULT_LIMIT=20))
        return service


@pytest.fixture
def sample_breakdown():
    return BalanceBreakdown(
        user_id="player-1",
        total_balance=Decimal("100.00"),
        bonus_balance=Decimal("0.00"),
        real_balance=Decimal("100.00"),
        available_for_withdrawal=Decimal("100.00"),
        has_active_bonus=False,
        active_bonus_count=0,
    )


class TestWalletService:
    """WalletService 테스트"""

    def test_get_balance(self, wallet_service, sample_breakdown):
        # Arrange
        wallet_service.engine.get_breakdown.return_value = sample_breakdown

        # Act
        result = wallet_service.get_balance("player-1")

        # Assert
        assert result == sample_breakdown
        wallet_service.engine.get_breakdown.assert_called_once_with("player-1")

    def test_apply_operation_delegates(self, wallet_service, sample_breakdown):
        wallet_service.engine.apply_operation.return_value = sample_breakdown

        result = wallet_service.apply_operation(
            "player-1", Decimal("10"), BalanceOperationKind.WIN, "slots"
        )

        assert result == sample_breakdown
        wallet_service.engine.apply_operation.assert_called_once_with(
            "player-1", Decimal("10"), BalanceOperationKind.WIN, "slots"
        )

    def test_business_errors_propagate(self, wallet_service):
        wallet_service.engine.apply_operation.side_effect = InsufficientBalanceError()

        with pytest.raises(InsufficientBalanceError):
            wallet_service.apply_operation(
                "player-1", Decimal("10"), BalanceOperationKind.BET
            )

    def test_history_uses_default_limit(self, wallet_service):
        wallet_service.recorder.history.return_value = []

        wallet_service.get_history("player-1")

        wallet_service.recorder.history.assert_called_once_with("player-1", 20)

    def test_history_passes_explicit_limit(self, wallet_service):
        wallet_service.recorder.history.return_value = []

        wallet_service.get_history("player-1", 5)

        wallet_service.recorder.history.assert_called_once_with("player-1", 5)

    def test_adjust_balance_argument_order(self, wallet_service, sample_breakdown):
        wallet_service.engine.adjust_balance.return_value = sample_breakdown

        wallet_service.adjust_balance("admin-1", "player-1", Decimal("5"), "goodwill")

        wallet_service.engine.adjust_balance.assert_called_once_with(
            "player-1", Decimal("5"), "goodwill", "admin-1"
        )

    def test_activate_promotion_returns_grant_and_balance(self, wallet_service, sample_breakdown):
        grant = Mock(id=3, bonus_amount=Decimal("50.00"))
        wallet_service.engine.activate_promotion.return_value = (grant, sample_breakdown)

        result = wallet_service.activate_promotion("player-1", 1, Decimal("100"))

        assert result == (grant, sample_breakdown)

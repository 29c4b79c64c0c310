"""
Matrix configuration.

Settings the matrix operations depend on, resolved once per call and
passed explicitly.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    APP_SETTING_MATRIX_PAYOUT,
    DIRECT_REFERRAL_SLOTS,
    FILL_ORDER,
)
from app.config.settings import settings
from app.repositories.app_setting_repository import AppSettingRepository
from app.utils.money import quantize_money


@dataclass(frozen=True)
class MatrixConfig:
    """Matrix settings for one operation."""

    payout_amount: Decimal
    direct_referral_slots: tuple[int, ...] = DIRECT_REFERRAL_SLOTS
    fill_order: tuple[int, ...] = FILL_ORDER


async def load_matrix_config(session: AsyncSession) -> MatrixConfig:
    """
    Resolve the matrix configuration.

    The bonus comes from the matrix_payout runtime setting when it holds
    a positive amount, otherwise from MATRIX_PAYOUT_DEFAULT.

    Args:
        session: Database session

    Returns:
        Matrix configuration
    """
    payout_amount = settings.matrix_payout_default
    raw_value = await AppSettingRepository(session).get_value(
        APP_SETTING_MATRIX_PAYOUT
    )

    if raw_value is not None:
        try:
            configured = Decimal(raw_value.strip())
        except InvalidOperation:
            configured = None
        if configured is not None and configured.is_finite() and configured > 0:
            payout_amount = configured
        else:
            logger.warning(
                "Invalid matrix_payout setting, using default",
                extra={"value": raw_value, "default": str(payout_amount)},
            )

    return MatrixConfig(payout_amount=quantize_money(payout_amount))

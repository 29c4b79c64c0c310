"""
Matrix store.

Opens matrices and serves the read-only matrix projections.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.operational_constants import MATRIX_LIST_LIMIT
from app.models.matrix_entry import MatrixEntry
from app.repositories.matrix_repository import MatrixFilter, MatrixRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.services.matrix.config import MatrixConfig, load_matrix_config
from app.utils.exceptions import (
    EntityNotFoundError,
    MatrixNotFoundError,
    ParticipantAlreadyPlacedError,
    ValidationError,
)


MATRIX_FILTERS = ("all", "active", "completed", "pending-payout")


class MatrixStore(BaseService):
    """Durable matrix records."""

    def __init__(self, session: AsyncSession, publisher=None) -> None:
        """
        Initialize matrix store.

        Args:
            session: Database session
            publisher: Event publisher
        """
        super().__init__(session, publisher)
        self.matrix_repo = MatrixRepository(session)
        self.user_repo = UserRepository(session)

    @transaction
    async def create_matrix(
        self,
        owner_id: int,
        campaign_id: int | None = None,
        config: MatrixConfig | None = None,
    ) -> MatrixEntry:
        """
        Open a matrix for an owner who opted in.

        The owner takes slot 1. Since a participant occupies at most one
        slot system-wide, an owner already placed anywhere is rejected.

        Args:
            owner_id: Owner user ID
            campaign_id: Campaign purchase that opened the matrix
            config: Matrix configuration (loaded if omitted)

        Returns:
            Created matrix

        Raises:
            EntityNotFoundError: Owner does not exist
            ParticipantAlreadyPlacedError: Owner already occupies a slot
        """
        owner = await self.user_repo.get_by_id(owner_id)
        if owner is None:
            raise EntityNotFoundError(f"User {owner_id} not found")

        if await self.matrix_repo.is_participant_placed(owner_id):
            raise ParticipantAlreadyPlacedError(
                f"User {owner_id} already occupies a matrix slot"
            )

        config = config or await load_matrix_config(self.session)
        try:
            entry = await self.matrix_repo.create_matrix(
                owner_id=owner_id,
                payout_amount=config.payout_amount,
                campaign_id=campaign_id,
            )
        except IntegrityError as e:
            raise ParticipantAlreadyPlacedError(
                f"User {owner_id} already occupies a matrix slot"
            ) from e

        self.logger.info(
            "Matrix created",
            extra={
                "matrix_id": entry.id,
                "owner_id": owner_id,
                "payout_amount": str(config.payout_amount),
            },
        )
        return entry

    async def get_matrix(self, matrix_id: int) -> MatrixEntry:
        """
        Get a matrix with its slots.

        Raises:
            MatrixNotFoundError: Matrix does not exist
        """
        entry = await self.matrix_repo.get_by_id(matrix_id)
        if entry is None:
            raise MatrixNotFoundError(f"Matrix {matrix_id} not found")
        return entry

    async def list_matrices(
        self, matrix_filter: str = "all", limit: int = MATRIX_LIST_LIMIT
    ) -> list[MatrixEntry]:
        """
        List matrices with slot occupancy and payout status.

        Args:
            matrix_filter: all, active, completed or pending-payout
            limit: Max number of results

        Raises:
            ValidationError: Unknown filter
        """
        if matrix_filter not in MATRIX_FILTERS:
            raise ValidationError(
                f"Unknown matrix filter: {matrix_filter}. "
                f"Use one of: {', '.join(MATRIX_FILTERS)}"
            )
        filter_value: MatrixFilter = matrix_filter  # type: ignore[assignment]
        return await self.matrix_repo.list_matrices(filter_value, limit=limit)

    async def get_stats(self) -> dict[str, int]:
        """Active, completed and pending-payout matrix counts."""
        return await self.matrix_repo.get_stats()

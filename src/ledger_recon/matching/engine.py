"""
Three-tier matching engine for check register / bank feed reconciliation.
Each tier widens the allowed date gap; records claimed by an earlier tier
are never offered to a later one.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
import logging

from ..config import MatchingTier, ReconConfig
from ..models.ledger import (
    BankItem,
    CheckItem,
    CheckStatus,
    Match,
    MatchCriteria,
    MatchRunResult,
    normalize_transaction_reference,
)
from ..utils.exceptions import ConfigurationError
from .strategies import DateRangeStrategy, ExactDateStrategy, MatchingStrategy

logger = logging.getLogger(__name__)

TIER_NUMBERS = (1, 2, 3)


class TieredMatcher:
    """
    Runs the tier passes in order over one pair of record sets.

    Matching is greedy: for each check row, the first bank row (in the
    order given) that a tier accepts wins. No global assignment is
    attempted, so every pairing can be explained by a single rule.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Application configuration (defaults when omitted)
        """
        self.config = config or ReconConfig()
        self.strategies = self._build_strategies()

    def _build_strategies(self) -> dict[int, tuple[MatchingTier, MatchingStrategy]]:
        """
        Build one strategy per configured tier.

        Returns:
            Mapping of tier number to (tier config, strategy)
        """
        matching_config = self.config.matching
        threshold = matching_config.similarity_threshold
        amount_tolerance = Decimal(str(matching_config.amount_tolerance))

        strategies: dict[int, tuple[MatchingTier, MatchingStrategy]] = {}
        for tier in matching_config.tiers:
            if tier.tier not in TIER_NUMBERS:
                raise ConfigurationError(
                    f"Matching tier {tier.tier} ({tier.name}) is not one of {TIER_NUMBERS}"
                )
            if tier.tier in strategies:
                raise ConfigurationError(f"Matching tier {tier.tier} configured twice")

            if tier.date_tolerance_days <= 0:
                strategy: MatchingStrategy = ExactDateStrategy(
                    similarity_threshold=threshold,
                    amount_tolerance=amount_tolerance,
                )
            else:
                strategy = DateRangeStrategy(
                    tier.date_tolerance_days,
                    similarity_threshold=threshold,
                    amount_tolerance=amount_tolerance,
                )
            strategies[tier.tier] = (tier, strategy)
            logger.debug(f"Loaded matching tier {tier.tier}: {strategy.describe()}")

        return strategies

    def is_tier_enabled(self, tier: int, criteria: MatchCriteria) -> bool:
        configured = self.strategies.get(tier)
        if configured is None:
            return False
        return configured[0].enabled and criteria.is_enabled(tier)

    def run_matching(
        self,
        check_items: list[CheckItem],
        bank_items: list[BankItem],
        criteria: Optional[MatchCriteria] = None,
        persisted_transaction_ids: Iterable[str] = (),
    ) -> MatchRunResult:
        """
        Pair check register rows with bank feed rows.

        Args:
            check_items: Candidate check register rows
            bank_items: Candidate bank feed rows
            criteria: Which tiers to run (all by default)
            persisted_transaction_ids: Bank transaction ids already matched by
                earlier runs; those bank rows are never offered

        Returns:
            Match lists per tier plus the rows left unmatched
        """
        criteria = criteria or MatchCriteria()
        start_time = datetime.now()
        logger.info(
            f"Starting matching run: {len(check_items)} check rows, "
            f"{len(bank_items)} bank rows"
        )

        known_ids = frozenset(b.transaction_id for b in bank_items) | frozenset(
            persisted_transaction_ids
        )

        # One consumed set per side, shared by every tier of this run
        consumed_checks: set[int] = set()
        consumed_banks: set[str] = set(persisted_transaction_ids)

        for check_item in check_items:
            if check_item.is_reconciled(known_ids):
                consumed_checks.add(check_item.row)
                status = check_item.status.strip()
                if status not in CheckStatus.RECONCILED:
                    consumed_banks.add(normalize_transaction_reference(status))

        result = MatchRunResult(run_at=start_time)

        for tier in TIER_NUMBERS:
            if not self.is_tier_enabled(tier, criteria):
                logger.debug(f"Tier {tier} disabled, skipping")
                continue

            _, strategy = self.strategies[tier]
            tier_matches = self._find_tier_matches(
                tier,
                strategy,
                check_items,
                bank_items,
                consumed_checks,
                consumed_banks,
            )
            result.matches_for(tier).extend(tier_matches)

            logger.debug(
                f"Tier {tier} ({strategy.describe()}): {len(tier_matches)} matches, "
                f"{len(check_items) - len(consumed_checks)} check rows remaining"
            )

        result.unmatched_check_items = [
            c for c in check_items if c.row not in consumed_checks
        ]
        result.unmatched_bank_items = [
            b for b in bank_items if b.transaction_id not in consumed_banks
        ]

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Matching run complete in {elapsed:.2f}s: "
            f"tier1={result.tier1_count}, tier2={result.tier2_count}, "
            f"tier3={result.tier3_count}, total={result.total_matches}"
        )

        return result

    def _find_tier_matches(
        self,
        tier: int,
        strategy: MatchingStrategy,
        check_items: list[CheckItem],
        bank_items: list[BankItem],
        consumed_checks: set[int],
        consumed_banks: set[str],
    ) -> list[Match]:
        """
        Run a single tier pass.

        The consumed sets are updated in place so that later tiers see
        what this tier claimed.
        """
        matches: list[Match] = []

        for check_item in check_items:
            if check_item.row in consumed_checks:
                continue

            for bank_item in bank_items:
                if bank_item.transaction_id in consumed_banks:
                    continue

                score = strategy.evaluate(check_item, bank_item)
                if score is None:
                    continue

                consumed_checks.add(check_item.row)
                consumed_banks.add(bank_item.transaction_id)
                matches.append(
                    Match(
                        tier=tier,
                        check_item=check_item,
                        bank_item=bank_item,
                        similarity=score,
                    )
                )
                logger.debug(
                    f"Tier {tier}: check row {check_item.row} "
                    f"'{check_item.description}' -> {bank_item.transaction_id} "
                    f"'{bank_item.description}' (similarity {score:.3f})"
                )
                break

        return matches

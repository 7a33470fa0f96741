"""Output formatting and display for R4R analysis results."""

from typing import List, Optional

from .models import AnalysisResult, BatchItem, ReviewPair, RiskLevel, Subject


# ANSI color codes
GREEN = '\033[92m'
YELLOW = '\033[93m'
RED = '\033[91m'
CYAN = '\033[96m'
BOLD = '\033[1m'
RESET = '\033[0m'

RISK_COLORS = {
    RiskLevel.LOW: GREEN,
    RiskLevel.MODERATE: YELLOW,
    RiskLevel.HIGH: RED,
}


def format_time_difference(days: Optional[float]) -> str:
    """Render a gap in the most readable unit."""
    if days is None:
        return '-'
    minutes = days * 24 * 60
    if minutes < 60:
        return f"{minutes:.0f}m"
    if minutes < 24 * 60:
        return f"{minutes / 60:.1f}h"
    return f"{days:.1f}d"


class OutputFormatter:
    """Formats and prints R4R analysis results."""

    def __init__(self, show_pairs: bool = True, max_pairs: int = 50):
        """Initialize the output formatter.

        Args:
            show_pairs: Whether to print the per-counterpart pair table
            max_pairs: Maximum number of pairs to print
        """
        self.show_pairs = show_pairs
        self.max_pairs = max_pairs

    def print_analysis(self, result: AnalysisResult):
        """Print the full report for one subject."""
        print("\n" + "="*80)
        print(f"R4R ANALYSIS FOR {result.subject.display_name}")
        print("="*80)

        print(f"\nReviews given:        {result.given}")
        print(f"Reviews received:     {result.received}")
        print(f"Reciprocal (+/+):     {result.reciprocal}")
        print(f"Quick reciprocations: {result.quick_reciprocations}")
        print(f"Avg reciprocal time:  {format_time_difference(result.avg_reciprocal_time_days if result.reciprocal else None)}")

        self._print_score_breakdown(result)

        if self.show_pairs:
            self._print_pairs(result.pairs)

    def _print_score_breakdown(self, result: AnalysisResult):
        breakdown = result.score_breakdown
        color = RISK_COLORS[result.risk_level]

        print("\n" + "-"*80)
        print(f"SCORE BREAKDOWN (formula {result.analysis_version})")
        print("-"*80)
        print(f"Base score:              {breakdown.base_score:6.2f}")
        print(f"Volume multiplier:       x{breakdown.volume_multiplier:.2f}  {breakdown.volume_reason}")
        print(f"Account age multiplier:  x{breakdown.account_age_multiplier:.2f}  {breakdown.account_age_reason}")
        print(f"After multipliers:       {breakdown.score_after_multipliers:6.2f}")
        print(f"Time penalty:            +{breakdown.time_penalty:.2f}  {breakdown.time_penalty_reason}")
        print(f"{BOLD}{color}Final score:             {breakdown.final_score}% ({result.risk_level.value.upper()} risk){RESET}")

    def _print_pairs(self, pairs: List[ReviewPair]):
        print("\n" + "-"*80)
        print("REVIEW RELATIONSHIPS")
        print("-"*80)

        if not pairs:
            print("\nNo review relationships found.")
            return

        print(f"{'Counterpart':<25} {'Gave':<10} {'Received':<10} {'Gap':<8} {'Their R4R':<10} {'Status'}")
        print(f"{'-'*80}")

        for pair in pairs[:self.max_pairs]:
            self._print_pair_row(pair)

        if len(pairs) > self.max_pairs:
            print(f"... and {len(pairs) - self.max_pairs} more")

    def _print_pair_row(self, pair: ReviewPair):
        gave = pair.given_record.rating.value if pair.given_record else '-'
        received = pair.received_record.rating.value if pair.received_record else '-'
        their_score = f"{pair.counterpart_risk_score}%" if pair.counterpart_risk_score is not None else '?'

        if pair.is_reciprocal and pair.is_quick:
            color = RED
            status = "⚠ Quick reciprocal"
        elif pair.is_reciprocal:
            color = YELLOW
            status = "↔ Reciprocal"
        elif pair.has_both_sides:
            color = RESET
            status = "Mutual, not both positive"
        else:
            color = RESET
            status = "→ One-way" if pair.given_record else "← One-way"

        name = pair.counterpart.display_name[:24]
        gap = format_time_difference(pair.time_difference_days)
        print(f"{color}{name:<25} {gave:<10} {received:<10} {gap:<8} {their_score:<10} {status}{RESET}")

    def print_failure(self, subject: Subject, message: str):
        """Report that a subject's data could not be loaded (distinct from a zero score)."""
        print(f"\n{RED}Could not load review data for {subject.display_name}: {message}{RESET}")
        print("No score was calculated.")

    def print_batch_summary(self, items: List[BatchItem]):
        """Print a one-line-per-subject summary of a batch run."""
        print("\n" + "="*80)
        print("BATCH SUMMARY")
        print("="*80)

        succeeded = [item for item in items if item.result is not None]
        failed = [item for item in items if item.result is None]

        for item in sorted(succeeded, key=lambda item: item.result.final_score, reverse=True):
            result = item.result
            color = RISK_COLORS[result.risk_level]
            print(f"{color}{result.subject.display_name:<30} {result.final_score:>3}%  "
                  f"{result.risk_level.value:<9} {result.reciprocal}/{result.received} reciprocal{RESET}")

        for item in failed:
            print(f"{RED}{item.subject.display_name:<30} ERROR  {item.error_message}{RESET}")

        high_risk = sum(1 for item in succeeded if item.result.risk_level == RiskLevel.HIGH)
        print(f"\n{len(succeeded)} analyzed, {len(failed)} failed, {high_risk} high risk")

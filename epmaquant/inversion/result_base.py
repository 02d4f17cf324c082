"""
Shared result formatting utilities for quantification results.

Used by IterationResult to render fixed-width text tables.
"""

from typing import Iterable, List, Mapping


# Table formatting constants
TABLE_WIDTH = 70
TABLE_SEP = "-" * TABLE_WIDTH
TABLE_HEADER = "=" * TABLE_WIDTH


class ResultTableMixin:
    """
    Mixin providing shared table formatting for result classes.
    """

    @staticmethod
    def _format_header(title: str) -> str:
        """Format a table header with title."""
        return f"{TABLE_HEADER}\n{title}\n{TABLE_HEADER}"

    @staticmethod
    def _format_separator() -> str:
        """Return a horizontal separator line."""
        return TABLE_SEP

    @staticmethod
    def _format_footer() -> str:
        """Return a table footer."""
        return TABLE_HEADER

    @staticmethod
    def _format_composition_table(
        mass_fractions: Mapping[str, float],
        measured_k: Mapping[str, float],
        calculated_k: Mapping[str, float],
    ) -> List[str]:
        """
        Format composition table rows.

        Parameters
        ----------
        mass_fractions : dict
            Mass fraction by element (measured and unmeasured)
        measured_k : dict
            Measured k-ratio by element
        calculated_k : dict
            Calculated k-ratio by element

        Returns
        -------
        list of str
            Formatted table rows
        """
        total = sum(mass_fractions.values())
        lines = [TABLE_SEP]
        lines.append(
            f"{'Element':<10} {'C':>12} {'C (norm)':>12} {'k (meas)':>12} {'k (calc)':>12}"
        )
        lines.append(TABLE_SEP)

        for el, c in mass_fractions.items():
            norm = c / total if total > 0 else float("nan")
            if el in measured_k:
                lines.append(
                    f"{el:<10} {c:>12.5f} {norm:>12.5f} "
                    f"{measured_k[el]:>12.5f} {calculated_k.get(el, float('nan')):>12.5f}"
                )
            else:
                lines.append(f"{el:<10} {c:>12.5f} {norm:>12.5f} {'-':>12} {'-':>12}")

        lines.append(TABLE_SEP)
        lines.append(f"{'Total':<10} {total:>12.5f}")
        return lines

    @staticmethod
    def _format_key_values(items: Iterable[tuple]) -> List[str]:
        """Format (label, value) rows."""
        return [f"{label:<30} {value}" for label, value in items]

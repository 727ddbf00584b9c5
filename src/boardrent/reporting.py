from .calculator import charges_frame
from .models import CostSummary
from .money import currency_info


def make_summary_text(summary: CostSummary) -> str:
    symbol = currency_info(summary.currency).symbol
    lines = [
        f"Billboards priced: {len(summary.charges)} ({summary.currency})",
        f"Estimated rental + print: {summary.estimated_total:,.2f} {symbol}",
        f"Base total: {summary.base_total:,.2f} {symbol}",
        f"Discount: {summary.discount_amount:,.2f} {symbol}",
        f"Installation: {summary.installation_cost:,.2f} {symbol}",
        f"Print: {summary.print_cost_total:,.2f} {symbol}",
        f"Rental only: {summary.rental_cost_only:,.2f} {symbol}",
        f"Operating fee ({summary.operating_fee_rate:g}%): {summary.operating_fee:,.2f} {symbol}",
        f"Final total: {summary.final_total:,.2f} {symbol}",
    ]
    frame = charges_frame(summary)
    if not frame.empty:
        top = frame.sort_values("CONTRACT_PRICE", ascending=False).head(5)[
            ["BILLBOARD_ID", "SIZE", "LEVEL", "CONTRACT_PRICE", "SOURCE"]
        ]
        lines.append(f"Top billboards:\n{top.to_string(index=False)}")
    return "\n".join(lines) + "\n"

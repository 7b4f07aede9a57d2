# Utility functions for debugging output.
from typing import Any, Dict, List, Optional


def format_kw(value: float) -> str:
    """Format a power value for display."""
    return f"{float(value):.2f} kW"


def format_kwh(value: float) -> str:
    """Format an energy value for display."""
    return f"{float(value):.1f} kWh"


def format_series_table(
    series: List[Dict[str, Any]],
    flows: Optional[List[Dict[str, Any]]] = None,
    include_color: bool = False,
) -> str:
    """Return sample records formatted as an ASCII table.

    Args:
        series: List of output records (oldest first).
        flows: Flow edges of the latest sample to append below the table.
        include_color: Include ANSI color codes.

    Returns:
        String containing the formatted table.
    """
    if not series:
        return "\nNo samples available"

    # ANSI color codes
    if include_color:
        RESET = "\033[0m"
        BOLD = "\033[1m"
        GREEN = "\033[92m"
        RED = "\033[91m"
        BLUE = "\033[94m"
        YELLOW = "\033[93m"
        CYAN = "\033[96m"
        MAGENTA = "\033[95m"
    else:
        RESET = BOLD = GREEN = RED = BLUE = YELLOW = CYAN = MAGENTA = ""

    lines = []
    lines.append("=" * 112)
    lines.append("SIMULATED SAMPLES")
    lines.append("=" * 112)

    header = (
        f"{BOLD}{CYAN}{'Time':>13}{RESET} | "
        f"{BOLD}{YELLOW}{'PV':>5}{RESET} | "
        f"{BOLD}{MAGENTA}{'Base':>5}{RESET} | "
        f"{BOLD}{MAGENTA}{'HP':>5}{RESET} | "
        f"{BOLD}{MAGENTA}{'EV':>6}{RESET} | "
        f"{BOLD}{BLUE}{'EV%':>6}{RESET} | "
        f"{BOLD}{'Batt':>6}{RESET} | "
        f"{BOLD}{BLUE}{'Batt%':>6}{RESET} | "
        f"{BOLD}{'Grid':>6}{RESET} | "
        f"{BOLD}{'Imp_kWh':>7}{RESET} | "
        f"{BOLD}{'Exp_kWh':>7}{RESET}"
    )
    lines.append(header)
    lines.append("-" * 112)

    for record in series:
        battery = record["batteryPower"]
        grid = record["grid"]
        batt_color = GREEN if battery > 0 else RED if battery < 0 else RESET
        grid_color = RED if grid > 0 else GREEN if grid < 0 else RESET

        row = (
            f"{CYAN}{record['time']:>13d}{RESET} | "
            f"{YELLOW}{record['pv']:5.2f}{RESET} | "
            f"{MAGENTA}{record['loadBase']:5.2f}{RESET} | "
            f"{MAGENTA}{record['heatPump']:5.2f}{RESET} | "
            f"{MAGENTA}{record['evPower']:6.2f}{RESET} | "
            f"{BLUE}{record['evSoc']:6.2f}{RESET} | "
            f"{batt_color}{battery:6.2f}{RESET} | "
            f"{BLUE}{record['batterySoc']:6.2f}{RESET} | "
            f"{grid_color}{grid:6.2f}{RESET} | "
            f"{record['gridImportEnergy']:7.1f} | "
            f"{record['gridExportEnergy']:7.1f}"
        )
        lines.append(row)

    lines.append("-" * 112)
    latest = series[-1]
    lines.append(
        f"PV energy: {format_kwh(latest['pvEnergy'])}, "
        f"EV charged: {format_kwh(latest['evChargeEnergy'])}, "
        f"EV discharged: {format_kwh(latest['evDischargeEnergy'])}"
    )

    if flows:
        lines.append(f"\n{BOLD}Energy flows (latest sample):{RESET}")
        for edge in flows:
            lines.append(
                f"  {edge['source']:>8} -> {edge['sink']:<8} {format_kw(edge['power_kw'])}"
            )

    lines.append(f"\n{BOLD}Legend:{RESET}")
    lines.append(f"  Batt: {GREEN}charging{RESET} (+) / {RED}discharging{RESET} (-)")
    lines.append(f"  Grid: {RED}import{RESET} (+) / {GREEN}export{RESET} (-)")
    lines.append("  EV: charging (+) / vehicle-to-home (-)")
    lines.append("=" * 112)

    return "\n".join(lines)

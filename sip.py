import sys

import config
from engine import run_projection
from formatting import format_cr_lac, rows_to_frame
from models import ConfigurationError


def _ask(prompt: str, default):
    raw = input(f"{prompt} [{default}]: ").strip()
    return raw or default


def sip_swp_calculator(form, preset=config.DEFAULT_PRESET):
    params = config.params_from_form(form, preset)
    result = run_projection(params)

    df = rows_to_frame(result.rows, formatted=True)
    summary = result.summary

    print("\nSIP & SWP Projection Table:\n")
    print(df.to_string(index=False))
    print("\nSummary:")
    print(f"Withdrawals start: Year {summary.withdrawal_start} of {summary.simulation_years}")
    print(f"Total Invested: {format_cr_lac(summary.total_contributed)}")
    print(f"Total Withdrawn: {format_cr_lac(summary.total_withdrawn)}")
    print(f"Total Interest: {format_cr_lac(summary.total_interest)}")
    print(f"Final Corpus: {summary.final_corpus_formatted} ({summary.final_corpus_cr_lac})")
    return result


def main():
    config.configure_logging("WARNING")
    print("SIP & SWP Calculator")
    print("=" * 50)

    preset = _ask(f"Calculator style ({', '.join(config.PRESETS)})", config.DEFAULT_PRESET)
    if preset not in config.PRESETS:
        print(f"Unknown style '{preset}', using {config.DEFAULT_PRESET}")
        preset = config.DEFAULT_PRESET

    form = {
        "sip": _ask("Monthly SIP investment (₹)", config.DEFAULT_SIP),
        "years": _ask("Years of investment", config.DEFAULT_YEARS),
        "rate": _ask("Annual interest rate (%)", config.DEFAULT_RATE),
        "stepup": _ask("Annual SIP increase (%)", config.DEFAULT_STEPUP),
        "swp_withdrawal": _ask("Monthly SWP withdrawal (₹)", config.DEFAULT_SWP_WITHDRAWAL),
        "swp_stepup": _ask("Annual SWP increase (%)", config.DEFAULT_SWP_STEPUP),
    }
    if config.PRESETS[preset]["explicit_swp_years"]:
        form["swp_years"] = _ask("Years of withdrawal", config.DEFAULT_SWP_YEARS)
    if not config.PRESETS[preset]["auto_start"]:
        form["swp_start"] = _ask("SWP start year", config.DEFAULT_SWP_START)
    if preset == "separate":
        form["tax"] = _ask("Tax on SIP corpus (%)", config.DEFAULT_TAX)
        form["inflation"] = _ask("Inflation (%)", config.DEFAULT_INFLATION)

    try:
        sip_swp_calculator(form, preset)
    except ConfigurationError as e:
        print(f"Invalid input: {e}")
        sys.exit(1)


# Example run
if __name__ == "__main__":
    main()

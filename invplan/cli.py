"""
Command-Line Interface for InvPlan.

Purpose
-------
Runs any calculator from the shell. Options are validated into parameter
records before a calculator is called; results are printed as Rich tables
or as JSON.

Commands
--------
- sip: Future value of a monthly contribution plan
- lumpsum: Future value of a one-time investment
- retirement: Retirement corpus (SWR and finite-horizon methods)
- cagr: Compound annual growth rate
- allocation: Age-based equity/debt split
- tax: Simplified capital-gains and 80C estimate
- xirr: Internal rate of return of dated cash flows
- goal: Monthly contribution required to reach a target
- run: Run a calculator described in a JSON file
- info: Show settings and available calculators

Example Usage
-------------
    $ invplan sip --monthly 20000 --rate 12 --years 20 --schedule
    $ invplan xirr -f 2024-01-01:-100000 -f 2025-01-01:112000
    $ invplan --json goal --target 10000000 --years 10 --rate 12 --existing 500000
    $ invplan run scenario.json
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

import click
from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .allocation import suggest_allocation
from .cagr import calculate_cagr
from .cashflow import solve_goal, solve_xirr
from .compounding import Schedule, project_lump_sum, project_sip
from .config import (
    AllocationParams,
    AppSettings,
    CAGRParams,
    GoalParams,
    LumpSumParams,
    RetirementParams,
    SIPParams,
    TaxParams,
    XirrParams,
    configure_logging,
    load_params,
)
from .exceptions import InvalidInputError, InvPlanError
from .retirement import RetirementPlan, plan_retirement
from .tax import estimate_tax_for
from .utils import format_currency, format_pct

PLACEHOLDER = "—"


# ---------------------------------------------------------------------------
# Calculator registry (used by `run`)
# ---------------------------------------------------------------------------

def _growth_payload(projection) -> Dict[str, Any]:
    return {**projection.to_dict(), "schedule": projection.schedule.to_records()}


def _retirement_payload(plan: RetirementPlan) -> Dict[str, Any]:
    return {
        "swr": plan.swr.to_dict(),
        "finite": plan.finite.to_dict(),
        "retirement_age": plan.retirement_age,
        "drawdown": plan.drawdown.to_records(),
    }


CALCULATORS: Dict[str, Tuple[Type[BaseModel], Callable[[Any], Dict[str, Any]]]] = {
    "sip": (SIPParams, lambda p: _growth_payload(project_sip(p))),
    "lumpsum": (LumpSumParams, lambda p: _growth_payload(project_lump_sum(p))),
    "retirement": (RetirementParams, lambda p: _retirement_payload(plan_retirement(p))),
    "cagr": (CAGRParams, lambda p: {"cagr_pct": calculate_cagr(p)}),
    "allocation": (AllocationParams, lambda p: suggest_allocation(p).to_dict()),
    "tax": (TaxParams, lambda p: estimate_tax_for(p).to_dict()),
    "xirr": (XirrParams, lambda p: solve_xirr(p, AppSettings().solver_config()).to_dict()),
    "goal": (GoalParams, lambda p: solve_goal(p).to_dict()),
}


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _load(record_cls: Type[BaseModel], data: Dict[str, Any]):
    """Validate CLI input into a record, exiting with status 1 on failure."""
    try:
        return load_params(record_cls, data)
    except InvalidInputError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _calculate(fn: Callable[..., Any], *args: Any) -> Any:
    """Run a calculator, exiting with status 1 when it rejects its input."""
    try:
        return fn(*args)
    except InvPlanError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _emit(
    ctx: click.Context,
    title: str,
    rows: List[Tuple[str, str]],
    payload: Dict[str, Any],
) -> None:
    """Print a metric table, or the JSON payload when --json is set."""
    if ctx.obj["json"]:
        click.echo(json.dumps(payload, indent=2, default=str))
        return
    table = Table(title=title, show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for label, value in rows:
        table.add_row(label, value)
    ctx.obj["console"].print(table)


def _emit_schedule(ctx: click.Context, title: str, schedule: Schedule) -> None:
    """Print a schedule as a table (skipped in --json mode, where it is in the payload)."""
    if ctx.obj["json"]:
        return
    money = ctx.obj["money"]
    table = Table(title=title, show_header=True)
    for col in schedule.columns:
        table.add_column(col.capitalize(), justify="right")
    for record in schedule.to_records():
        cells = []
        for col in schedule.columns:
            value = record[col]
            if value is None:
                cells.append(PLACEHOLDER)
            elif col in ("year", "age"):
                cells.append(f"{value:g}")
            else:
                cells.append(money(value))
        table.add_row(*cells)
    ctx.obj["console"].print(table)


def _parse_flow(text: str) -> Dict[str, Any]:
    """Parse 'YYYY-MM-DD:AMOUNT' into a cash-flow mapping."""
    try:
        d, amount = text.rsplit(":", 1)
        return {"date": d.strip(), "amount": float(amount)}
    except ValueError:
        raise click.BadParameter(
            f"expected DATE:AMOUNT (e.g. 2024-01-01:-100000), got {text!r}"
        ) from None


# ---------------------------------------------------------------------------
# Command group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(version=__version__, prog_name="invplan")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def main(ctx: click.Context, as_json: bool) -> None:
    """
    InvPlan - Investment Projection and Solver Engine.

    Deterministic calculators for SIP and lump-sum growth, retirement
    corpus, CAGR, asset allocation, tax, XIRR and goal planning.

    Use 'invplan COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    configure_logging(settings)
    ctx.ensure_object(dict)
    ctx.obj["json"] = as_json
    ctx.obj["settings"] = settings
    ctx.obj["console"] = Console()
    ctx.obj["money"] = lambda v: format_currency(v, symbol=settings.currency_symbol)


@main.command()
@click.option("--monthly", "-m", type=float, required=True, help="Monthly contribution")
@click.option("--rate", "-r", type=float, required=True, help="Expected annual return (%)")
@click.option("--years", "-y", type=float, required=True, help="Horizon in years")
@click.option("--schedule", is_flag=True, help="Print the year-by-year schedule")
@click.pass_context
def sip(ctx: click.Context, monthly: float, rate: float, years: float, schedule: bool) -> None:
    """
    Project a monthly contribution plan (SIP).

    Example:
        invplan sip -m 20000 -r 12 -y 20 --schedule
    """
    params = _load(SIPParams, {"monthly": monthly, "annual_return_pct": rate, "years": years})
    proj = _calculate(project_sip, params)
    money = ctx.obj["money"]
    _emit(ctx, "SIP Projection", [
        ("Total Invested", money(proj.total_invested)),
        ("Future Value", money(proj.future_value)),
        ("Wealth Gain", money(proj.wealth_gain)),
    ], _growth_payload(proj))
    if schedule:
        _emit_schedule(ctx, "SIP Schedule", proj.schedule)


@main.command()
@click.option("--principal", "-p", type=float, required=True, help="Amount invested today")
@click.option("--rate", "-r", type=float, required=True, help="Expected annual return (%)")
@click.option("--years", "-y", type=float, required=True, help="Horizon in years")
@click.option("--periods-per-year", type=int, default=12, help="Compounding periods per year (default: 12)")
@click.option("--schedule", is_flag=True, help="Print the year-by-year schedule")
@click.pass_context
def lumpsum(
    ctx: click.Context,
    principal: float,
    rate: float,
    years: float,
    periods_per_year: int,
    schedule: bool,
) -> None:
    """
    Project a one-time investment.

    Example:
        invplan lumpsum -p 1000000 -r 10 -y 15
    """
    params = _load(LumpSumParams, {
        "principal": principal,
        "annual_return_pct": rate,
        "years": years,
        "periods_per_year": periods_per_year,
    })
    proj = _calculate(project_lump_sum, params)
    money = ctx.obj["money"]
    _emit(ctx, "Lump Sum Projection", [
        ("Invested", money(proj.total_invested)),
        ("Future Value", money(proj.future_value)),
        ("Wealth Gain", money(proj.wealth_gain)),
    ], _growth_payload(proj))
    if schedule:
        _emit_schedule(ctx, "Lump Sum Schedule", proj.schedule)


@main.command()
@click.option("--expense", type=float, required=True, help="Monthly expense today")
@click.option("--inflation", type=float, default=6.0, help="Annual inflation (%) (default: 6)")
@click.option("--years-to-retire", type=float, required=True, help="Years until retirement")
@click.option("--years-in-retirement", type=float, default=30.0, help="Years in retirement (default: 30)")
@click.option("--post-return", type=float, default=7.0, help="Post-retirement return (%) (default: 7)")
@click.option("--swr", type=float, default=4.0, help="Safe withdrawal rate (%) (default: 4)")
@click.option("--age", type=float, default=None, help="Current age (labels the drawdown)")
@click.option("--schedule", is_flag=True, help="Print the drawdown schedule")
@click.pass_context
def retirement(
    ctx: click.Context,
    expense: float,
    inflation: float,
    years_to_retire: float,
    years_in_retirement: float,
    post_return: float,
    swr: float,
    age: Optional[float],
    schedule: bool,
) -> None:
    """
    Estimate the retirement corpus under both methods.

    Example:
        invplan retirement --expense 60000 --years-to-retire 25 --age 35
    """
    params = _load(RetirementParams, {
        "monthly_expense_today": expense,
        "inflation_pct": inflation,
        "years_to_retire": years_to_retire,
        "years_in_retirement": years_in_retirement,
        "post_ret_return_pct": post_return,
        "swr_pct": swr,
        "current_age": age,
    })
    plan = _calculate(plan_retirement, params)
    money = ctx.obj["money"]
    rows = [
        ("Annual Expense at Retirement", money(plan.annual_expense_at_retire)),
        (f"Corpus (SWR {params.swr_pct:g}%)", money(plan.swr.corpus)),
        (f"Corpus ({params.years_in_retirement:g} years)", money(plan.finite.corpus)),
        ("Real Return", format_pct(plan.finite.real_rate * 100)),
    ]
    if plan.retirement_age is not None:
        rows.insert(0, ("Retirement Age", f"{plan.retirement_age:g}"))
    _emit(ctx, "Retirement Corpus", rows, _retirement_payload(plan))
    if schedule:
        _emit_schedule(ctx, "Drawdown Schedule", plan.drawdown)


@main.command("cagr")
@click.option("--initial", type=float, required=True, help="Starting value")
@click.option("--final", type=float, required=True, help="Ending value")
@click.option("--years", "-y", type=float, required=True, help="Duration in years")
@click.pass_context
def cagr_command(ctx: click.Context, initial: float, final: float, years: float) -> None:
    """
    Compound annual growth rate between two values.

    Example:
        invplan cagr --initial 500000 --final 2500000 -y 5
    """
    params = _load(CAGRParams, {"initial": initial, "final": final, "years": years})
    value = _calculate(calculate_cagr, params)
    _emit(ctx, "CAGR", [("CAGR", format_pct(value))], {"cagr_pct": value})


@main.command()
@click.option("--age", type=float, required=True, help="Investor age")
@click.option(
    "--rule",
    type=click.Choice(["110-age", "100-age"]),
    default="110-age",
    help="Allocation rule (default: 110-age)"
)
@click.pass_context
def allocation(ctx: click.Context, age: float, rule: str) -> None:
    """
    Suggested equity/debt split for an age.

    Example:
        invplan allocation --age 30 --rule 100-age
    """
    params = _load(AllocationParams, {"age": age, "rule": rule})
    alloc = _calculate(suggest_allocation, params)
    _emit(ctx, "Asset Allocation", [
        ("Equity", format_pct(alloc.equity, 0)),
        ("Debt", format_pct(alloc.debt, 0)),
    ], alloc.to_dict())


@main.command()
@click.option("--ltcg", type=float, default=0.0, help="Long-term capital gains")
@click.option("--stcg", type=float, default=0.0, help="Short-term capital gains")
@click.option("--other-income", type=float, default=0.0, help="Other income")
@click.option("--income-before-80c", type=float, default=0.0, help="Taxable income before 80C")
@click.option("--investments-80c", type=float, default=0.0, help="Qualifying 80C investments")
@click.pass_context
def tax(
    ctx: click.Context,
    ltcg: float,
    stcg: float,
    other_income: float,
    income_before_80c: float,
    investments_80c: float,
) -> None:
    """
    Simplified capital-gains tax and 80C deduction estimate.

    Example:
        invplan tax --ltcg 120000 --stcg 20000 --other-income 1200000 --investments-80c 100000
    """
    params = _load(TaxParams, {
        "ltcg_gain": ltcg,
        "stcg_gain": stcg,
        "other_income": other_income,
        "taxable_income_before_80c": income_before_80c,
        "investments_80c": investments_80c,
    })
    est = _calculate(estimate_tax_for, params)
    money = ctx.obj["money"]
    _emit(ctx, "Tax Estimate", [
        ("LTCG Taxable", money(est.ltcg_taxable)),
        ("LTCG Tax", money(est.ltcg_tax)),
        ("STCG Tax", money(est.stcg_tax)),
        ("Total Capital Gains Tax", money(est.total_capital_gains_tax)),
        ("Eligible 80C", money(est.eligible_80c)),
        ("Gross Income", money(est.gross_income)),
        ("Taxable After 80C", money(est.taxable_after_deduction)),
    ], est.to_dict())


@main.command("xirr")
@click.option(
    "--flow", "-f",
    "flows",
    multiple=True,
    required=True,
    help="Cash flow as DATE:AMOUNT (repeatable; negative = investment)"
)
@click.option("--guess", type=float, default=0.10, help="Initial guess as a decimal (default: 0.10)")
@click.pass_context
def xirr_command(ctx: click.Context, flows: Tuple[str, ...], guess: float) -> None:
    """
    Internal rate of return of dated cash flows.

    Exits with status 2 when the solver does not converge.

    Example:
        invplan xirr -f 2024-01-01:-100000 -f 2025-01-01:112000
    """
    params = _load(XirrParams, {"cashflows": [_parse_flow(f) for f in flows], "guess": guess})
    result = _calculate(solve_xirr, params, ctx.obj["settings"].solver_config())
    value = format_pct(result.rate_pct) if result.converged else PLACEHOLDER
    _emit(ctx, "XIRR", [
        ("XIRR", value),
        ("Status", result.status),
        ("Iterations", str(result.iterations)),
    ], result.to_dict())
    if not result.converged:
        click.echo(
            f"Warning: solver stopped ({result.status}); no reliable rate.",
            err=True,
        )
        sys.exit(2)


@main.command()
@click.option("--target", type=float, required=True, help="Target amount")
@click.option("--years", "-y", type=float, required=True, help="Horizon in years")
@click.option("--rate", "-r", type=float, required=True, help="Expected annual return (%)")
@click.option("--existing", type=float, default=0.0, help="Existing corpus")
@click.option("--lumpsum", "lump", type=float, default=0.0, help="Additional lump sum invested now")
@click.pass_context
def goal(
    ctx: click.Context,
    target: float,
    years: float,
    rate: float,
    existing: float,
    lump: float,
) -> None:
    """
    Monthly contribution required to reach a target.

    Example:
        invplan goal --target 10000000 -y 10 -r 12 --existing 500000
    """
    params = _load(GoalParams, {
        "target_amount": target,
        "years": years,
        "expected_annual_return_pct": rate,
        "existing_corpus": existing,
        "lumpsum": lump,
    })
    result = _calculate(solve_goal, params)
    money = ctx.obj["money"]
    _emit(ctx, "Goal Plan", [
        ("Existing Corpus at Horizon", money(result.future_value_existing)),
        ("Shortfall", money(result.shortfall)),
        ("Required Monthly", money(result.required_monthly)),
        ("Months", str(result.periods)),
    ], result.to_dict())


@main.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def run(ctx: click.Context, config_file: Path) -> None:
    """
    Run a calculator described in a JSON file.

    The file holds {"calculator": NAME, "params": {...}}; parameter names may
    be snake_case or camelCase. Output is always JSON.

    Example:
        invplan run scenario.json
    """
    try:
        with open(config_file, "r") as f:
            scenario = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        click.echo(f"Error loading {config_file}: {e}", err=True)
        sys.exit(1)

    name = scenario.get("calculator") if isinstance(scenario, dict) else None
    if name not in CALCULATORS:
        click.echo(
            f"Error: unknown calculator {name!r}. Available: {', '.join(sorted(CALCULATORS))}",
            err=True,
        )
        sys.exit(1)

    record_cls, fn = CALCULATORS[name]
    params = _load(record_cls, scenario.get("params", {}))
    try:
        payload = fn(params)
    except InvPlanError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(json.dumps({"calculator": name, "result": payload}, indent=2, default=str))


@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Show settings and available calculators.

    Example:
        invplan info
    """
    settings: AppSettings = ctx.obj["settings"]
    console: Console = ctx.obj["console"]
    text = f"""
[bold]InvPlan v{__version__}[/bold]

[cyan]Calculators:[/cyan] {', '.join(sorted(CALCULATORS))}

[cyan]Settings (INVPLAN_*):[/cyan]
  log_level: {settings.log_level}
  currency_symbol: {settings.currency_symbol}
  xirr_max_iterations: {settings.xirr_max_iterations}
  xirr_tolerance: {settings.xirr_tolerance:g}
"""
    console.print(Panel(text, title="InvPlan", border_style="blue"))


if __name__ == "__main__":
    main()

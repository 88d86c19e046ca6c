"""
Console demo: runs a rule workflow for a sample customer and prints the outcome.

Usage:
    python -m rulesdemo                              # instance-method DiscountWorkflow
    python -m rulesdemo --workflow EligibilityRules  # a bundled workflow
    python -m rulesdemo --date 2025-06-14 --json     # pin "today", emit JSON
    python -m rulesdemo --list
"""
import argparse
import json
import logging
from datetime import date
from typing import List, Optional

from rulesdemo.config import get_settings
from rulesdemo.demo import DISCOUNT_WORKFLOW, build_discount_workflow, sample_customer
from rulesdemo.models import Customer
from rulesdemo.rules import RuleEngineError, RuleResult, WorkflowNotFoundError, WorkflowRunResult
from rulesdemo.services import BusinessLogic, DiscountService, RulesEngineService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def print_customer(customer: Customer) -> None:
    print(f"Customer: {customer.name}")
    print(f"Country: {customer.country}")
    print(f"Loyalty Factor: {customer.loyalty_factor}")
    print(f"Total Purchases: ${customer.total_purchases_to_date:,.2f}")
    registered = customer.registration_date.isoformat() if customer.registration_date else "-"
    print(f"Registration Date: {registered}")
    print(f"Email: {customer.email}")
    print()


def print_operation_results(customer: Customer, business_logic: BusinessLogic, discount_service: DiscountService) -> None:
    print("External Function Results (Instance Methods):")
    print(f"Is VIP Customer: {business_logic.is_vip_customer(customer.total_purchases_to_date, customer.loyalty_factor)}")
    print(f"Email Valid: {business_logic.is_valid_email(customer.email)}")
    if customer.registration_date is not None:
        print(f"Customer Age (years): {business_logic.get_customer_age(customer.registration_date)}")
    print(f"Discount Category: {business_logic.get_discount_category(customer.total_purchases_to_date)}")
    print(f"Is Weekend: {business_logic.is_weekend()}")
    print(f"Service Eligible: {discount_service.is_eligible_for_discount(customer)}")
    print(f"Service Discount %: {discount_service.get_discount_percentage(customer)}")
    print()


def format_result(result: RuleResult) -> str:
    status = "✓ PASSED" if result.is_success else "✗ FAILED"
    return f"{status} - {result.rule_name}\n   {result.message}\n"


def print_results(results: List[RuleResult]) -> None:
    print("\nRule Execution Results:")
    print("-" * 40)
    for result in results:
        print(format_result(result))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulesdemo",
        description="Run a rule workflow against a sample customer",
    )
    parser.add_argument(
        "--workflow",
        default=DISCOUNT_WORKFLOW,
        help=f"Workflow to execute (default: {DISCOUNT_WORKFLOW})",
    )
    parser.add_argument("--rules-dir", help="Directory or JSON file with workflow definitions")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Date treated as today by business logic (YYYY-MM-DD)",
    )
    parser.add_argument("--list", action="store_true", help="List registered workflows and exit")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--log-level", help="Logging level (default: RULESDEMO_LOG_LEVEL or INFO)")
    return parser


def resolve_log_level(name: str) -> int:
    """Numeric logging level for a level name such as "debug" or "INFO"."""
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{name}'")
    return level


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
        level = resolve_log_level(args.log_level or settings.log_level)
    except ValueError as e:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error(f"Invalid configuration: {e}")
        return EXIT_ERROR

    logging.basicConfig(level=level, format=LOG_FORMAT)

    today = args.date or settings.current_date
    try:
        service = RulesEngineService(
            rules_dir=args.rules_dir,
            current_date=today,
            extra_workflows=[build_discount_workflow()],
        )
    except RuleEngineError as e:
        logger.error(f"Failed to load workflows: {e}")
        return EXIT_ERROR

    if args.list:
        for name in service.engine.workflow_names():
            print(name)
        return EXIT_OK

    customer = sample_customer(today)

    try:
        results = service.execute_workflow(args.workflow, customer)
    except WorkflowNotFoundError as e:
        logger.error(str(e))
        return EXIT_ERROR

    if args.json:
        run = WorkflowRunResult(workflow_name=args.workflow, results=results)
        print(json.dumps(run.model_dump(mode="json"), indent=2))
        return EXIT_OK

    print("=== Rules Engine Demo - Instance Methods ===")
    print()
    print_customer(customer)
    print_operation_results(customer, service.business_logic, service.discount_service)
    print(f"Executing {args.workflow}...")
    print_results(results)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())

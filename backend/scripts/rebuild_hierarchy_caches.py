"""
Hierarchy Cache Audit Script
Recomputes the denormalized hierarchy caches of a company from the
authoritative manager_id pointers.

Issues reported:
1. direct_reports arrays that no longer match who points at the manager
2. reporting_chain arrays that no longer match the manager_id walk
3. manager_id values pointing at missing, inactive or foreign users
4. cycles in the manager graph (reported only, never repaired)

Run directly (dry run unless --apply is given):
    python -m scripts.rebuild_hierarchy_caches --company-id <id>
"""
import asyncio
import json
import logging
from datetime import datetime, timezone

from database import close_database
from services.hierarchy_service import audit_hierarchy_caches

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run_audit(company_ids, apply=False):
    """
    Audit (and optionally repair) the hierarchy caches of each company.

    Args:
        company_ids: Companies to audit
        apply: If True, rewrite stale caches

    Returns:
        dict with one audit result per company
    """
    try:
        results = {
            "applied": apply,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "companies": {}
        }
        for company_id in company_ids:
            audit = await audit_hierarchy_caches(company_id, apply=apply)
            results["companies"][company_id] = audit.model_dump()
            if audit.cycles:
                logger.warning(f"{len(audit.cycles)} cycle(s) in company {company_id} need manual repair")
        return results
    finally:
        await close_database()


# CLI entry point
if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Hierarchy cache audit tool")
    parser.add_argument("--company-id", action="append", required=True,
                        help="Company to audit (repeatable)")
    parser.add_argument("--apply", action="store_true",
                        help="Rewrite stale caches (default is a dry run)")

    args = parser.parse_args()

    results = asyncio.run(run_audit(args.company_id, apply=args.apply))
    print(json.dumps(results, indent=2, default=str))

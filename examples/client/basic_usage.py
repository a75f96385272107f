"""
Basic usage example of LicenseManager.

Validates the cached license, then gates a few operations on the result.
Start a development backend first with ``licgate serve --accept-any`` and
activate a key with ``licgate activate <key>``.
"""

import logging
import sys

from licgate import LicenseInitializationError, LicenseManager


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        manager = LicenseManager()
    except LicenseInitializationError:
        logger.exception("License system unavailable")
        sys.exit(1)

    with manager:
        outcome = manager.initialize()
        logger.info("Initialization: %s (%s)", outcome.type.value, outcome.message)

        status = manager.current_status
        logger.info(
            "State: %s, access level: %s, plan: %s",
            status.state.value,
            status.access_level.display_name,
            status.plan_type,
        )

        for feature_id in ("AlignLeft", "TextBox", "DuplicateShape"):
            decision = manager.check_feature_access(feature_id)
            if not decision.ok:
                logger.error("Could not check %s: %s", feature_id, decision.error)
            elif decision.allowed:
                logger.info("%s: available", feature_id)
            else:
                logger.info("%s: unavailable (%s)", feature_id, decision.reason)

        selection_size = 25
        if manager.is_within_object_limit(selection_size):
            logger.info("Bulk operation on %d objects permitted", selection_size)
        else:
            logger.info("Bulk operation on %d objects needs an upgrade", selection_size)


if __name__ == "__main__":
    main()

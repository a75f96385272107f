"""
Gating application commands with the licgate decorators.
"""

import logging

from licgate import (
    FeatureAccessError,
    LicenseManager,
    requires_active_license,
    requires_feature,
)


class Toolbar:
    """Application commands, each tied to an entitlement."""

    def __init__(self, license_manager: LicenseManager):
        self.license_manager = license_manager

    @requires_feature("license_manager", "AlignLeft")
    def align_left(self) -> str:
        return "aligned"

    @requires_feature(
        "license_manager", "TextBox", "Text boxes are part of the Pro plan"
    )
    def add_text_box(self) -> str:
        return "text box added"

    @requires_feature("license_manager", "ShapeOval", raise_exception=False)
    def add_oval(self) -> str:
        return "oval added"

    @requires_active_license("license_manager")
    def export(self) -> str:
        return "exported"


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    with LicenseManager() as manager:
        manager.initialize()
        toolbar = Toolbar(manager)

        for command in (toolbar.align_left, toolbar.add_text_box, toolbar.export):
            try:
                logger.info("%s: %s", command.__name__, command())
            except FeatureAccessError as e:
                logger.warning("%s blocked: %s", command.__name__, e)

        # Returns None instead of raising when not entitled
        logger.info("add_oval: %s", toolbar.add_oval())


if __name__ == "__main__":
    main()

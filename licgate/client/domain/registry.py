"""Domain layer: feature entitlement registry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from licgate.client.domain.access import AccessLevel
from licgate.client.domain.entities import FeatureRequirement

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

FREE = AccessLevel.FREE
PRO = AccessLevel.PRO

# (feature id, display name, category, required level)
_FEATURE_TABLE: list[tuple[str, str, str, AccessLevel]] = [
    # Selection
    ("SelectSameColorShapes", "Select by color", "Selection", PRO),
    ("SelectSameSizeShapes", "Select by size", "Selection", PRO),
    ("SelectSimilarShapes", "Select similar shapes", "Selection", PRO),
    # Text
    ("ToggleTextWrap", "Toggle text wrap", "Text", PRO),
    ("AdjustMarginUp", "Increase margin", "Text", PRO),
    ("AdjustMarginDown", "Decrease margin", "Text", PRO),
    ("ShowMarginAdjustDialog", "Adjust margins", "Text", PRO),
    ("TextBox", "Text box", "Text", PRO),
    ("ClearTextsFromSelectedShapes", "Clear text", "Text", PRO),
    # Shape
    ("ShapeRectangle", "Rectangle", "Shape", PRO),
    ("ShapeRoundedRectangle", "Rounded rectangle", "Shape", PRO),
    ("ShapeOval", "Oval", "Shape", PRO),
    ("ShapeIsoscelesTriangle", "Triangle", "Shape", PRO),
    ("ShapeRectangularCallout", "Callout", "Shape", PRO),
    ("ShapeRightArrow", "Right arrow", "Shape", PRO),
    ("ShapeDownArrow", "Down arrow", "Shape", PRO),
    ("ShapeLine", "Line", "Shape", PRO),
    ("ShapeLineArrow", "Arrow line", "Shape", PRO),
    ("ShapeElbowConnector", "Elbow connector", "Shape", PRO),
    ("ShapeElbowArrowConnector", "Elbow arrow connector", "Shape", PRO),
    ("ShapeLeftBrace", "Brace", "Shape", PRO),
    ("ShapePentagon", "Pentagon", "Shape", PRO),
    ("ShapeChevron", "Chevron", "Shape", PRO),
    ("ShapeStyleSettings", "Shape style settings", "Shape", PRO),
    # Format
    ("SizeUpToggle", "Size up", "Format", PRO),
    ("SizeDownToggle", "Size down", "Format", PRO),
    ("LineWeightUpToggle", "Line weight up", "Format", PRO),
    ("LineWeightDownToggle", "Line weight down", "Format", PRO),
    ("DashStyleToggle", "Toggle dash style", "Format", PRO),
    ("TransparencyUpToggle", "Transparency up", "Format", PRO),
    ("TransparencyDownToggle", "Transparency down", "Format", PRO),
    ("MatchHeight", "Match height", "Format", PRO),
    ("MatchWidth", "Match width", "Format", PRO),
    ("MatchSize", "Match size", "Format", PRO),
    ("MatchFormat", "Match format", "Format", PRO),
    ("AlignSizeLeft", "Stretch to left edge", "Format", PRO),
    ("AlignSizeRight", "Stretch to right edge", "Format", PRO),
    ("AlignSizeTop", "Stretch to top edge", "Format", PRO),
    ("AlignSizeBottom", "Stretch to bottom edge", "Format", PRO),
    ("AlignLineLength", "Match line length", "Format", PRO),
    # Grouping
    ("GroupShapes", "Group", "Grouping", PRO),
    ("UngroupShapes", "Ungroup", "Grouping", PRO),
    ("GroupByRows", "Group by rows", "Grouping", PRO),
    ("GroupByColumns", "Group by columns", "Grouping", PRO),
    # Alignment
    ("AlignLeft", "Align left", "Alignment", FREE),
    ("AlignCenterHorizontal", "Align center", "Alignment", FREE),
    ("AlignRight", "Align right", "Alignment", FREE),
    ("AlignTop", "Align top", "Alignment", FREE),
    ("AlignCenterVertical", "Align middle", "Alignment", FREE),
    ("AlignBottom", "Align bottom", "Alignment", FREE),
    ("PlaceLeftToRight", "Place left edge on right edge", "Alignment", PRO),
    ("PlaceRightToLeft", "Place right edge on left edge", "Alignment", PRO),
    ("PlaceTopToBottom", "Place top edge on bottom edge", "Alignment", PRO),
    ("PlaceBottomToTop", "Place bottom edge on top edge", "Alignment", PRO),
    ("CenterAlign", "Center both ways", "Alignment", PRO),
    ("MakeLineHorizontal", "Make horizontal", "Alignment", PRO),
    ("MakeLineVertical", "Make vertical", "Alignment", PRO),
    ("MatchRoundCorner", "Match corner radius", "Alignment", PRO),
    ("MatchEnvironment", "Match chevron shape", "Alignment", PRO),
    # Shape operations
    ("SplitShape", "Split shape", "ShapeOperation", PRO),
    ("DuplicateShape", "Duplicate shape", "ShapeOperation", PRO),
    ("GenerateMatrix", "Generate matrix", "ShapeOperation", PRO),
    ("AddSequentialNumbers", "Add sequential numbers", "ShapeOperation", PRO),
    ("MergeText", "Merge text shapes", "ShapeOperation", PRO),
    ("SwapPositions", "Swap positions", "ShapeOperation", PRO),
    # Table operations
    ("ConvertTableToTextBoxes", "Table to shapes", "TableOperation", PRO),
    ("ConvertTextBoxesToTable", "Shapes to table", "TableOperation", PRO),
    ("OptimizeMatrixRowHeights", "Optimize row heights", "TableOperation", PRO),
    ("OptimizeTableComplete", "Optimize table", "TableOperation", PRO),
    ("EqualizeRowHeights", "Equalize row heights", "TableOperation", PRO),
    ("EqualizeColumnWidths", "Equalize column widths", "TableOperation", PRO),
    ("ExcelToPptx", "Excel to slides", "TableOperation", PRO),
    ("AddMatrixRowSeparators", "Row separators", "TableOperation", PRO),
    ("AlignShapesToCells", "Align shapes to cells", "TableOperation", PRO),
    ("AddHeaderRowToMatrix", "Add header row", "TableOperation", PRO),
    ("SetCellMargins", "Cell margins", "TableOperation", PRO),
    ("AddMatrixRow", "Add row", "TableOperation", PRO),
    ("AddMatrixColumn", "Add column", "TableOperation", PRO),
    ("MatrixTuner", "Matrix tuner", "TableOperation", PRO),
    # Spacing
    ("RemoveSpacing", "Remove spacing", "Spacing", PRO),
    ("AdjustHorizontalSpacing", "Horizontal spacing", "Spacing", PRO),
    ("AdjustVerticalSpacing", "Vertical spacing", "Spacing", PRO),
    ("AdjustEqualSpacing", "Equal spacing", "Spacing", PRO),
    # Power tools
    ("UnifyFont", "Replace fonts", "PowerTool", PRO),
    ("CompressImages", "Compress images", "PowerTool", PRO),
]

DEFAULT_FEATURES: list[FeatureRequirement] = [
    FeatureRequirement(
        feature_id=feature_id,
        display_name=name,
        required_level=level,
        category=category,
        order=order,
    )
    for order, (feature_id, name, category, level) in enumerate(_FEATURE_TABLE)
]


class EntitlementRegistry:
    """Read-only map from feature id to the minimum access level it needs.

    Lookups are case-insensitive. Unknown ids require PRO; disabled features
    are unavailable at every level except DEVELOPMENT.
    """

    def __init__(self, features: Iterable[FeatureRequirement] | None = None):
        self._features: dict[str, FeatureRequirement] = {}
        for feature in DEFAULT_FEATURES if features is None else features:
            key = feature.feature_id.lower()
            if key in self._features:
                msg = f"Duplicate feature id: {feature.feature_id}"
                raise ValueError(msg)
            self._features[key] = feature
        logger.debug(
            "Feature registry initialized with %d features", len(self._features)
        )

    def __len__(self) -> int:
        return len(self._features)

    def __contains__(self, feature_id: object) -> bool:
        return isinstance(feature_id, str) and feature_id.lower() in self._features

    def get_feature(self, feature_id: str) -> FeatureRequirement | None:
        return self._features.get(feature_id.lower())

    def features(self) -> list[FeatureRequirement]:
        return sorted(self._features.values(), key=lambda f: f.order)

    def get_required_level(self, feature_id: str) -> AccessLevel:
        feature = self.get_feature(feature_id)
        if feature is None:
            return AccessLevel.PRO
        return feature.required_level

    def is_feature_available(
        self, feature_id: str, current_level: AccessLevel
    ) -> bool:
        if current_level is AccessLevel.DEVELOPMENT:
            return True
        if current_level is AccessLevel.BLOCKED:
            return False

        feature = self.get_feature(feature_id)
        if feature is None:
            logger.warning(
                "Unknown feature: %s, defaulting to Pro requirement", feature_id
            )
            return current_level.is_at_least(AccessLevel.PRO)
        if not feature.enabled:
            logger.debug("Feature %s is disabled", feature_id)
            return False
        return current_level.is_at_least(feature.required_level)

    def get_feature_count_by_level(self) -> dict[AccessLevel, int]:
        """Number of enabled features usable at each paid or free tier."""
        enabled = [f for f in self._features.values() if f.enabled]
        return {
            level: sum(1 for f in enabled if level.is_at_least(f.required_level))
            for level in (
                AccessLevel.FREE,
                AccessLevel.STARTER,
                AccessLevel.GROWTH,
                AccessLevel.PRO,
            )
        }

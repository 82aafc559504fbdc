from enum import Enum


class EdgeKind(str, Enum):
    """Edge variant (UNWEIGHTED, WEIGHTED).

    Attributes:
        UNWEIGHTED: Edge carrying no weight; renders with the ``U`` tag
        WEIGHTED: Edge carrying a concrete weight; renders with the ``W`` tag
    """

    UNWEIGHTED = "unweighted"
    WEIGHTED = "weighted"

    @property
    def tag(self) -> str:
        return "W" if self is EdgeKind.WEIGHTED else "U"

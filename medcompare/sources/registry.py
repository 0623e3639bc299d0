from __future__ import annotations

from medcompare.sources.apollo import ApolloAdapter
from medcompare.sources.base import SourceAdapter
from medcompare.sources.netmeds import NetmedsAdapter
from medcompare.sources.onemg import OneMgAdapter
from medcompare.sources.pharmeasy import PharmEasyAdapter
from medcompare.sources.truemeds import TruemedsAdapter

ADAPTER_CLASSES: dict[str, type[SourceAdapter]] = {
    cls.source_id: cls
    for cls in (
        ApolloAdapter,
        PharmEasyAdapter,
        NetmedsAdapter,
        OneMgAdapter,
        TruemedsAdapter,
    )
}


def build_adapters() -> dict[str, SourceAdapter]:
    """One adapter instance per known source, keyed by source id."""
    return {source: cls() for source, cls in ADAPTER_CLASSES.items()}

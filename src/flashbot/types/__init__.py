from flashbot.types.basic import BaseModel, HexInt
from flashbot.types.mev import (
    BroadcastResponse,
    Bundle,
    BundleHashItem,
    BundleNestedItem,
    BundleParams,
    BundleStats,
    BundleTxItem,
    Inclusion,
    Metadata,
    Privacy,
    PrivacyHint,
    ProtocolVersion,
    Refund,
    RefundConfig,
    SimBundleLogs,
    SimulationReport,
    UserStats,
    Validity,
)
from flashbot.types.rpc import JsonRpcRequest, JsonRpcResponse, RPCError

__all__ = [
    "BaseModel",
    "BroadcastResponse",
    "Bundle",
    "BundleHashItem",
    "BundleNestedItem",
    "BundleParams",
    "BundleStats",
    "BundleTxItem",
    "HexInt",
    "Inclusion",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "Metadata",
    "Privacy",
    "PrivacyHint",
    "ProtocolVersion",
    "Refund",
    "RefundConfig",
    "RPCError",
    "SimBundleLogs",
    "SimulationReport",
    "UserStats",
    "Validity",
]

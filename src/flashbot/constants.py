MAINNET_CHAIN_ID = 1
SEPOLIA_CHAIN_ID = 11155111

MAINNET_RELAY_URL = "https://relay.flashbots.net"
SEPOLIA_RELAY_URL = "https://relay-sepolia.flashbots.net"

NETWORKS = {
    # relay_url, chain_id
    "mainnet": (MAINNET_RELAY_URL, MAINNET_CHAIN_ID),
    "sepolia": (SEPOLIA_RELAY_URL, SEPOLIA_CHAIN_ID),
}
DEFAULT_NETWORK = "mainnet"

JSON_RPC_VERSION = "2.0"
SIGNATURE_HEADER = "X-Flashbots-Signature"

LATEST_BLOCK = "latest"
DEFAULT_EXPIRATION_BLOCKS = 30
"""
Blocks past the target block a broadcast bundle stays valid for,
unless an option overrides ``maxBlock``.
"""

MAX_REQUEST_ID = 1_000_000

# Bundle methods.
METHOD_MEV_SIM_BUNDLE = "mev_simBundle"
METHOD_MEV_SEND_BUNDLE = "mev_sendBundle"
METHOD_ETH_CANCEL_BUNDLE = "eth_cancelBundle"

# Refund and account methods.
METHOD_GET_FEE_REFUND_TOTALS_BY_RECIPIENT = "flashbots_getFeeRefundTotalsByRecipient"
METHOD_SET_FEE_REFUND_RECIPIENT = "flashbots_setFeeRefundRecipient"
METHOD_GET_MEV_REFUND_TOTAL_BY_RECIPIENT = "flashbots_getMevRefundTotalByRecipient"
METHOD_GET_MEV_REFUND_TOTAL_BY_SENDER = "flashbots_getMevRefundTotalBySender"

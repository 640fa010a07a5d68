"""Minimal ABIs for the campaign factory, fundraiser and ERC-20 token contracts."""


def _view(name: str, output: str, inputs: list[tuple[str, str]] | None = None) -> dict[str, object]:
    return {
        "inputs": [{"internalType": t, "name": n, "type": t} for n, t in inputs or []],
        "name": name,
        "outputs": [{"internalType": output, "name": "", "type": output}],
        "stateMutability": "view",
        "type": "function",
    }


def _write(name: str, inputs: list[tuple[str, str]] | None = None, output: str | None = None) -> dict[str, object]:
    return {
        "inputs": [{"internalType": t, "name": n, "type": t} for n, t in inputs or []],
        "name": name,
        "outputs": [{"internalType": output, "name": "", "type": output}] if output else [],
        "stateMutability": "nonpayable",
        "type": "function",
    }


FACTORY_ABI: list[dict[str, object]] = [
    _view("getFundraisers", "address[]"),
    _write(
        "createFundraiser",
        [
            ("_name", "string"),
            ("_description", "string"),
            ("_goalAmount", "uint256"),
            ("_deadline", "uint256"),
        ],
        output="address",
    ),
]

FUNDRAISER_ABI: list[dict[str, object]] = [
    _view("name", "string"),
    _view("description", "string"),
    _view("creator", "address"),
    _view("goalAmount", "uint256"),
    _view("deadline", "uint256"),
    _view("totalRaised", "uint256"),
    _view("withdrawn", "bool"),
    _view("cancelled", "bool"),
    _view("isGoalMet", "bool"),
    _view("isExpired", "bool"),
    _view("usdc", "address"),
    _view("feeBps", "uint256"),
    _view("donations", "uint256", [("", "address")]),
    _write("donate", [("amount", "uint256")]),
    _write("withdraw"),
    _write("cancel"),
    _write("claimRefund"),
]

ERC20_ABI: list[dict[str, object]] = [
    _view("allowance", "uint256", [("owner", "address"), ("spender", "address")]),
    _view("balanceOf", "uint256", [("account", "address")]),
    _write("approve", [("spender", "address"), ("amount", "uint256")], output="bool"),
]

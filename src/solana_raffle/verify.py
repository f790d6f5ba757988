from __future__ import annotations

import json
from typing import Any, Dict, List

from .draw import select_winner


def verify_round(entry: Dict[str, Any], entrance_fee: int) -> Dict[str, Any]:
    n = entry["round_number"]
    entrants: List[str] = list(entry["entrants"])
    word = int(entry["random_word"])

    index, winner = select_winner(entrants, word)
    if index != int(entry["winner_index"]):
        raise RuntimeError(
            f"Round {n}: winner index mismatch: audit={entry['winner_index']} recomputed={index}"
        )
    if winner != entry["winner"]:
        raise RuntimeError(
            f"Round {n}: winner mismatch: audit={entry['winner']} recomputed={winner}"
        )

    prize = int(entry["prize"])
    if prize < len(entrants) * entrance_fee:
        raise RuntimeError(
            f"Round {n}: prize {prize} is below {len(entrants)} x entrance fee {entrance_fee}"
        )
    return {"round_number": n, "winner": winner, "winner_index": index, "prize": prize}


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)

    entrance_fee = int(audit["metadata"]["entrance_fee"])
    rounds = audit["rounds"]
    if not rounds:
        raise RuntimeError("Audit contains no rounds.")

    request_ids = [r["request_id"] for r in rounds]
    if len(set(request_ids)) != len(request_ids):
        raise RuntimeError("Audit settles the same request more than once.")

    return {
        "ok": True,
        "entrance_fee": entrance_fee,
        "rounds": [verify_round(r, entrance_fee) for r in rounds],
    }

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import Settings
from .custody import CustodyLedger
from .draw import to_sol, word_from_seed
from .errors import RaffleError
from .keeper import Keeper
from .raffle import Raffle
from .randomness import LocalCoordinator, RpcCoordinator
from .rpc import RpcClient
from .verify import verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


class SimClock:
    """Simulated wall clock; simulations jump it forward instead of sleeping."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def cmd_simulate(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    log = logging.getLogger("simulate")

    clock = SimClock()
    ledger = CustodyLedger()
    coordinator = LocalCoordinator()
    raffle = Raffle.from_settings(settings, coordinator, ledger, clock=clock, history_limit=None)
    coordinator.bind(raffle.fulfill_random_words)
    keeper = Keeper(raffle)

    for n in range(args.rounds):
        for addr in args.entrant:
            raffle.enter(addr, settings.entrance_fee)

        clock.advance(settings.interval_s)
        request_id = keeper.run_once()
        if request_id is None:
            raise SystemExit(f"Round {n + 1}: upkeep not needed ({raffle.upkeep_status()}).")

        words = None
        if args.seed is not None:
            word, _ = word_from_seed(f"{args.seed}:{n + 1}")
            words = [word]
        coordinator.fulfill(request_id, words)
        log.info("Round %d settled by request %d", n + 1, request_id)

    audit: Dict[str, Any] = {
        "metadata": {
            "tool": "solana-raffle",
            "version": "1.0.0",
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "coordinator": "local",
            "seed": args.seed,
            "entrance_fee": settings.entrance_fee,
            "interval_s": settings.interval_s,
            "key_hash": settings.key_hash,
            "subscription_id": settings.subscription_id,
        },
        "rounds": [
            {
                "round_number": r.round_number,
                "request_id": r.request_id,
                "random_word": str(r.random_word),  # big int; store as string for safety
                "winner_index": r.winner_index,
                "winner": r.winner,
                "prize": r.prize,
                "entrants": list(r.entrants),
            }
            for r in raffle.results
        ],
    }

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)

    print("========================================")
    print("🎟  RECURRING SOL RAFFLE (simulation)")
    print("========================================")
    print(f"Entrance fee  : {to_sol(settings.entrance_fee)} SOL")
    print(f"Entrants/round: {len(args.entrant)}")
    for r in raffle.results:
        print("----------------------------------------")
        print(f"Round {r.round_number} (request {r.request_id})")
        print(f"Winner        : {r.winner}")
        print(f"Slot          : {r.winner_index} of {len(r.entrants)}")
        print(f"Prize         : {to_sol(r.prize)} SOL")
    print("----------------------------------------")
    print(f"🧾 Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("✅ AUDIT VERIFIED")
    for r in result["rounds"]:
        print(f"Round {r['round_number']}: {r['winner']} (slot {r['winner_index']}, {to_sol(r['prize'])} SOL)")
    return 0


def cmd_request(args: argparse.Namespace) -> int:
    settings = Settings.from_env(coordinator_url_override=args.rpc_url)
    if not settings.coordinator_url:
        raise SystemExit("Missing VRF_COORDINATOR_URL (or --rpc-url). Put it in .env or export it.")

    rpc = RpcClient(settings.coordinator_url, timeout_s=args.timeout)
    try:
        request_id = RpcCoordinator(rpc).request_random_words(settings.randomness_request())
    finally:
        rpc.close()
    print(f"Request id    : {request_id}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    settings = Settings.from_env(coordinator_url_override=args.rpc_url)
    if not settings.coordinator_url:
        raise SystemExit("Missing VRF_COORDINATOR_URL (or --rpc-url). Put it in .env or export it.")

    rpc = RpcClient(settings.coordinator_url, timeout_s=args.timeout)
    try:
        words = RpcCoordinator(rpc).poll(args.request_id)
    finally:
        rpc.close()

    if words is None:
        print(f"Request {args.request_id}: pending")
        return 1
    print(f"Request {args.request_id}: fulfilled")
    for w in words:
        print(f"Word          : {w}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="solana-raffle",
        description="Recurring SOL raffle settled by a VRF coordinator.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override coordinator URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("simulate", help="Run rounds against a local coordinator and write an audit JSON.")
    s.add_argument(
        "--entrant",
        action="append",
        required=True,
        help="Participant address (base58). Repeat to add entries; duplicates buy extra slots.",
    )
    s.add_argument("--rounds", type=int, default=1, help="Number of rounds to run.")
    s.add_argument(
        "--seed",
        default=None,
        help="Derive each round's random word from this public seed instead of the OS RNG.",
    )
    s.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    s.set_defaults(func=cmd_simulate)

    v = sub.add_parser("verify", help="Verify an existing audit.json deterministically.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    r = sub.add_parser("request", help="Send one randomness request to the remote coordinator.")
    r.set_defaults(func=cmd_request)

    st = sub.add_parser("status", help="Poll a remote request for its random words.")
    st.add_argument("--request-id", required=True, type=int, help="Request id to look up.")
    st.set_defaults(func=cmd_status)

    return p


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except RaffleError as e:
        logging.getLogger("solana-raffle").error("%s", e)
        code = 1
    raise SystemExit(code)

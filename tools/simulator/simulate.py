#!/usr/bin/env python3
"""ClockGuard clock-in/out traffic simulator.

Generates honest and spoofed attendance attempts against a running server,
so the risk scoring and geofence decisions can be eyeballed end to end.

Usage:
    # 10 employees around the default site, 20% of them spoofing
    python -m tools.simulator.simulate --server http://localhost:8000 --employees 10

    # Only spoofers, specific site
    python -m tools.simulator.simulate --center -6.17511,106.82719 --spoof-ratio 1.0
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import random
import time
import uuid
from collections import Counter
from dataclasses import dataclass, field

import httpx

SPOOF_STYLES = ("rounded", "teleport", "debug", "perfect")


@dataclass
class SimEmployee:
    session_id: str
    user_id: str
    lat: float
    lon: float
    spoof: str | None = None
    outcomes: Counter = field(default_factory=Counter)
    errors: int = 0


def scatter(center_lat: float, center_lon: float, radius_m: float) -> tuple[float, float]:
    """Random point within radius_m of the center."""
    angle = random.uniform(0, 2 * math.pi)
    dist = radius_m * math.sqrt(random.random())
    dlat = dist * math.cos(angle) / 111_000
    dlon = dist * math.sin(angle) / (111_000 * math.cos(math.radians(center_lat)))
    return center_lat + dlat, center_lon + dlon


def make_payload(emp: SimEmployee, now_ms: int) -> dict:
    """Build one clock request body, applying the employee's spoofing style."""
    lat, lon = scatter(emp.lat, emp.lon, 15)
    accuracy = random.uniform(6, 30)
    user_agent = "Mozilla/5.0 (Linux; Android 14; Pixel 7) Mobile Safari/537.36"
    environment = {"hostname": "attendance.example.com", "protocol": "https:"}

    if emp.spoof == "rounded":
        lat, lon = float(round(lat)), float(round(lon))
    elif emp.spoof == "teleport":
        # Jump a few hundred km between attempts.
        lat += random.choice((-1, 1)) * random.uniform(2, 4)
    elif emp.spoof == "debug":
        user_agent += " FakeGPS MockLocation"
        environment = {"hostname": "localhost", "protocol": "http:", "has_devtools_hook": True}
    elif emp.spoof == "perfect":
        accuracy = 1.0

    return {
        "session_id": emp.session_id,
        "user_id": emp.user_id,
        "position": {
            "latitude": lat,
            "longitude": lon,
            "accuracy": round(accuracy, 1),
            "altitude": random.uniform(5, 60),
            "speed": None,
            "timestamp": now_ms,
        },
        "device": {
            "user_agent": user_agent,
            "platform": "Linux armv8l",
            "language": "id-ID",
            "timezone": "Asia/Jakarta",
            "screen_width": 412,
            "screen_height": 915,
            "device_memory": 8,
            "hardware_concurrency": 8,
        },
        "environment": environment,
        "confirmed": True,
    }


async def run_employee(
    client: httpx.AsyncClient,
    emp: SimEmployee,
    server_url: str,
    rounds: int,
    interval: float,
) -> None:
    """Alternate clock-in and clock-out for a number of rounds."""
    for i in range(rounds * 2):
        endpoint = "clock-in" if i % 2 == 0 else "clock-out"
        payload = make_payload(emp, int(time.time() * 1000))
        try:
            resp = await client.post(
                f"{server_url}/api/v1/{endpoint}",
                content=json.dumps(payload),
                headers={"content-type": "application/json"},
            )
            data = resp.json()
            emp.outcomes[data.get("outcome") or data.get("error", "unknown")] += 1
        except (httpx.RequestError, ValueError):
            emp.errors += 1

        await asyncio.sleep(interval)


async def run_simulation(args: argparse.Namespace) -> None:
    """Run the full simulation."""
    center_lat, center_lon = args.center
    employees = []
    for _ in range(args.employees):
        lat, lon = scatter(center_lat, center_lon, args.radius_m)
        spoof = random.choice(SPOOF_STYLES) if random.random() < args.spoof_ratio else None
        employees.append(SimEmployee(
            session_id=str(uuid.uuid4()),
            user_id=str(uuid.uuid4()),
            lat=lat,
            lon=lon,
            spoof=spoof,
        ))

    print(f"Starting simulation: {args.employees} employees, {args.rounds} rounds each")
    print(f"  Center: {center_lat:.5f}, {center_lon:.5f}")
    print(f"  Spoof ratio: {args.spoof_ratio:.0%}")
    print(f"  Server: {args.server}")
    print()

    start = time.monotonic()

    async with httpx.AsyncClient(timeout=20.0) as client:
        tasks = [
            run_employee(client, emp, args.server, args.rounds, args.interval)
            for emp in employees
        ]
        await asyncio.gather(*tasks)

    elapsed = time.monotonic() - start
    print(f"Simulation complete in {elapsed:.1f}s\n")

    by_style: dict[str, Counter] = {}
    for emp in employees:
        by_style.setdefault(emp.spoof or "honest", Counter()).update(emp.outcomes)
    for style, outcomes in sorted(by_style.items()):
        summary = ", ".join(f"{k}={v}" for k, v in sorted(outcomes.items()))
        print(f"  {style:<10} {summary}")
    print(f"  Transport errors: {sum(e.errors for e in employees)}")

    # Check server stats
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(f"{args.server}/api/v1/stats")
        if resp.status_code == 200:
            stats = resp.json()
            print("\nServer stats:")
            print(f"  Attempts: {stats['attempts']}")
            print(f"  Outcomes: {stats['outcomes']}")
            print(f"  Risk levels: {stats['risk_levels']}")
            print(f"  Records stored: {stats['records_stored']}")
    except httpx.HTTPError:
        pass


def main():
    parser = argparse.ArgumentParser(description="ClockGuard clock-in/out simulator")
    parser.add_argument("--server", default="http://localhost:8000", help="Server URL")
    parser.add_argument("--employees", type=int, default=10, help="Number of simulated employees")
    parser.add_argument("--rounds", type=int, default=3, help="Clock-in/out pairs per employee")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between attempts")
    parser.add_argument("--center", type=str, default="-6.17511,106.82719",
                        help="Site center lat,lon (default: Jakarta)")
    parser.add_argument("--radius-m", type=float, default=60.0, help="Scatter radius in meters")
    parser.add_argument("--spoof-ratio", type=float, default=0.2,
                        help="Fraction of employees spoofing their location")

    args = parser.parse_args()

    lat, lon = args.center.split(",")
    args.center = (float(lat), float(lon))

    asyncio.run(run_simulation(args))


if __name__ == "__main__":
    main()

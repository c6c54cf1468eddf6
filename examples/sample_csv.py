#!/usr/bin/env python3
"""Generate a synthetic sensor CSV for viewer testing.

Writes /tmp/csvscope_sample.csv with an ISO-8601 time column and a handful
of noisy sine-wave channels, plus a few malformed rows so the fallbacks show
up in the loaded data.

Usage:
    python examples/sample_csv.py [rows]

Then:
    csvscope-viewer /tmp/csvscope_sample.csv
"""

import math
import random
import sys
from datetime import datetime, timedelta, timezone

OUT_PATH = "/tmp/csvscope_sample.csv"
COLUMNS = ["time", "temperature", "pressure", "humidity", "rpm", "current", "leak"]


def make_row(t0: datetime, i: int) -> list[str]:
    t = i * 0.1  # 10 Hz

    temp = 22.0 + 5.0 * math.sin(2 * math.pi * t / 10.0) + random.gauss(0, 0.3)
    pres = 1013.0 + 20.0 * math.sin(2 * math.pi * t / 30.0) + random.gauss(0, 1.0)
    hum = 50.0 + 15.0 * math.sin(2 * math.pi * t / 20.0) + random.gauss(0, 0.5)
    rpm = 3000.0 + 500.0 * math.sin(2 * math.pi * t / 5.0) + random.gauss(0, 20)
    cur = 2.5 + 0.8 * math.sin(2 * math.pi * t / 5.0 + 0.5) + random.gauss(0, 0.05)
    leak = abs(random.gauss(0, 2e-4))  # tiny values, shown in exponential form

    ts = (t0 + timedelta(seconds=t)).isoformat(timespec="milliseconds")
    return [ts.replace("+00:00", "Z")] + [
        f"{v:.6g}" for v in (temp, pres, hum, rpm, cur, leak)]


def main() -> None:
    rows = int(sys.argv[1]) if len(sys.argv) > 1 else 100_000
    t0 = datetime.now(timezone.utc).replace(microsecond=0)

    with open(OUT_PATH, "w", encoding="utf-8", newline="") as f:
        f.write(",".join(COLUMNS) + "\n")
        for i in range(rows):
            fields = make_row(t0, i)
            if i % 10_000 == 5_000:
                fields[0] = "sensor reset"   # timestamp falls back to row ordinal
            if i % 10_000 == 7_000:
                fields = fields[:3]          # short row, rest zero-filled
            f.write(",".join(fields) + "\n")
            if i % 25_000 == 0:
                f.write("\n")

    print(f"Wrote {rows:,} rows to {OUT_PATH}")


if __name__ == "__main__":
    main()

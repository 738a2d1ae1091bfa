"""
Writes the seeded demo applications to data/demo_applications.csv.
"""

import os
import sys

import pandas as pd

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jbcapital.demo_applications import generate_applications


def main():
    df = pd.DataFrame(generate_applications())
    out_path = os.path.join(os.path.dirname(__file__), "demo_applications.csv")
    df.drop(columns=["loan_calculation", "documents"]).to_csv(out_path, index=False)
    print(f"[JB Capital] Generated {len(df)} demo applications → {out_path}")
    print(f"  Statuses: {df['status'].value_counts().to_dict()}")


if __name__ == "__main__":
    main()

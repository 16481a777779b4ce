#!/usr/bin/env python3
"""
Generate a large point cloud for benchmarking polynomial fits.

- 2,000,000 (x, y) pairs
- y is a cubic in x plus Gaussian noise
- Written as headerless "x,y" lines, the format read_points() expects
"""

import os

import numpy as np
import pandas as pd

print("="*80)
print("GENERATING BENCHMARK POINT CLOUD")
print("="*80)
print()

N_POINTS = 2_000_000
TRUE_COEF = np.array([0.002, -0.15, 1.5, 4.0])  # highest degree first
NOISE_SD = 0.5

print(f"Generating dataset:")
print(f"  Points:      {N_POINTS:,}")
print(f"  True poly:   {TRUE_COEF.tolist()} (highest degree first)")
print(f"  Noise SD:    {NOISE_SD}")
print()

np.random.seed(42)

x = np.random.uniform(-20, 20, N_POINTS)
y = np.polyval(TRUE_COEF, x) + np.random.normal(0, NOISE_SD, N_POINTS)

df = pd.DataFrame({'x': x, 'y': y})

print("First few rows:")
print(df.head())
print()

print("Saving to points.csv...")
df.to_csv('points.csv', index=False, header=False)

file_size_mb = os.path.getsize('points.csv') / 1e6

print(f"✓ Data saved! File size: {file_size_mb:.1f} MB")
print()
print("Now run:")
print("  python benchmark_polyfit.py")
print()

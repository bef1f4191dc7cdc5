#!/usr/bin/env python3
"""
Sweep wind speed and air temperature through the blowing snow model.

Runs each parameterization combination over a grid of 2 m wind speeds and
air temperatures at fixed relative humidity, writes the fluxes to CSV and
plots flux against wind speed.

Usage:
    python sweep_wind_speed.py
    python sweep_wind_speed.py --rh 0.8 --temps -20 -10 -2 --output-dir sweep
    python sweep_wind_speed.py --flux-method simple --no-spatial-wind
"""

import argparse
import logging
import sys
from itertools import product
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from blowsnow import BlowingSnowModel, BlowingSnowConfig
from blowsnow.turbulent import sat_vapor_pressure


def build_forcing(winds, temps, rh, snow_depth, last_snow, svp_method='water'):
    """Forcing table with one row per (temperature, wind) pair."""
    rows = []
    for t_air, wind in product(temps, winds):
        rows.append({
            't_air': t_air,
            'wind': wind,
            'e_air': rh * sat_vapor_pressure(t_air, method=svp_method),
            'snow_depth': snow_depth,
            'last_snow': last_snow,
            't_snow': min(t_air, 0.0),
        })
    return pd.DataFrame(rows)


def get_configs(args):
    """Parameterization combinations to compare."""
    configs = {}
    flux_methods = [args.flux_method] if args.flux_method else ['full', 'simple']
    threshold_methods = ['variable', 'constant']

    for flux_method, threshold_method in product(flux_methods, threshold_methods):
        name = f"{flux_method}/{threshold_method}"
        configs[name] = BlowingSnowConfig(
            flux_method=flux_method,
            threshold_method=threshold_method,
            spatial_wind=not args.no_spatial_wind,
            svp_method=args.svp_method,
        )
    return configs


def run_sweep(forcing, configs, site):
    """Run every configuration; returns a long-format DataFrame."""
    frames = []
    for name, config in configs.items():
        print(f"  Running {name}...")
        model = BlowingSnowModel(config)
        outputs = model.run(forcing, site=site, dt=1.0)

        frame = forcing[['t_air', 'wind']].copy()
        frame['config'] = name
        for key, values in outputs.items():
            frame[key] = values
        frames.append(frame)

    return pd.concat(frames, ignore_index=True)


def create_sweep_plot(results, output_path):
    """Flux against wind speed, one panel per configuration."""
    names = list(results['config'].unique())
    fig, axes = plt.subplots(1, len(names), figsize=(5 * len(names), 4.5),
                             sharey=True, squeeze=False)

    temps = sorted(results['t_air'].unique())
    colors = plt.cm.coolwarm(np.linspace(0, 1, len(temps)))

    for ax, name in zip(axes[0], names):
        subset = results[results['config'] == name]
        for t_air, color in zip(temps, colors):
            rows = subset[subset['t_air'] == t_air]
            # mm/hr of SWE, positive = loss
            ax.plot(rows['wind'], -rows['flux'] * 3600.0, color=color,
                    linewidth=1.5, label=f"{t_air:g} °C")

        ax.set_title(name)
        ax.set_xlabel('Wind at 2 m (m/s)')
        ax.grid(True, alpha=0.3)

    axes[0][0].set_ylabel('Blowing snow sublimation (mm/hr)')
    axes[0][-1].legend(loc='upper left', fontsize=9)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    print(f"\nPlot saved: {output_path}")
    plt.close()


def main():
    parser = argparse.ArgumentParser(
        description='Sweep wind speed and temperature through the blowing snow model.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument('--wind-max', type=float, default=20.0,
                        help='Maximum 2 m wind speed [m/s] (default: 20)')
    parser.add_argument('--wind-step', type=float, default=0.5,
                        help='Wind speed increment [m/s] (default: 0.5)')
    parser.add_argument('--temps', type=float, nargs='+', default=[-20.0, -10.0, -2.0],
                        help='Air temperatures [°C]')
    parser.add_argument('--rh', type=float, default=0.7,
                        help='Relative humidity [0-1] (default: 0.7)')
    parser.add_argument('--snow-depth', type=float, default=0.5,
                        help='Snow depth [m] (default: 0.5)')
    parser.add_argument('--last-snow', type=float, default=48.0,
                        help='Hours since last snowfall (default: 48)')
    parser.add_argument('--fetch', type=float, default=1000.0,
                        help='Fetch distance [m] (default: 1000)')
    parser.add_argument('--flux-method', choices=['full', 'simple'], default=None,
                        help='Only run one flux method')
    parser.add_argument('--svp-method', choices=['water', 'ice'], default='water')
    parser.add_argument('--no-spatial-wind', action='store_true',
                        help='Use the mean wind only')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Output directory for CSV and plot')
    parser.add_argument('--log-level', type=str, default='WARNING')

    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(),
                        format='%(levelname)s %(name)s: %(message)s')

    if not 0.0 < args.rh <= 1.0:
        print("Error: --rh must be in (0, 1]")
        sys.exit(1)

    if args.output_dir:
        output_dir = Path(args.output_dir)
    else:
        output_dir = Path(__file__).parent.parent / 'wind_sweep'
    output_dir.mkdir(exist_ok=True)

    print("\n" + "=" * 60)
    print("BlowSnow Wind Speed Sweep")
    print("=" * 60)

    winds = np.arange(args.wind_step, args.wind_max + 1e-9, args.wind_step)
    forcing = build_forcing(winds, args.temps, args.rh, args.snow_depth,
                            args.last_snow, svp_method=args.svp_method)
    site = {'fetch': args.fetch}

    print(f"\n{len(winds)} wind speeds x {len(args.temps)} temperatures, RH={args.rh:g}")
    configs = get_configs(args)
    results = run_sweep(forcing, configs, site)

    csv_file = output_dir / 'blowing_snow_sweep.csv'
    results.to_csv(csv_file, index=False)
    print(f"Results saved: {csv_file}")

    create_sweep_plot(results, output_dir / 'blowing_snow_sweep.png')

    print("\n" + "-" * 60)
    summary = results.groupby(['config', 't_air'])['flux'].min() * 3600.0
    print("Maximum sublimation (mm/hr):")
    print((-summary).to_string())

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == '__main__':
    main()

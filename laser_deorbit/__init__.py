"""
Ground-Laser Debris Deorbit Package

This package simulates a multi-pass campaign in which a pulsed ground laser
lowers the perigee of a piece of space debris until drag takes over.

Modules:
    config: Constants, materials and runtime settings
    models: Records exchanged with callers
    tle: TLE parsing and validation
    orbital_mechanics: Keplerian elements and two-body propagation
    propagation: SGP4/Keplerian propagation and station look angles
    visibility: Visibility pass prediction for one or more stations
    laser: Beam propagation, fluence and momentum coupling
    thermal: Thermal budget of the target across engagements
    orbital_evolution: Delta-V application and decay estimates
    planner: Pass-by-pass campaign planning
    cost: Campaign cost and comparison with other removal methods
    validation: Input checks
    analysis: Target selection estimates
    mission: End-to-end campaign runs

References:
    Phipps, C. R. et al. (2012). Removing orbital debris with lasers.
    Advances in Space Research 49, 1283-1300.
"""

__version__ = "1.0.0"

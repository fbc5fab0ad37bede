"""
config/simulation_config.py
Numerical constants and driver defaults for the Eve QPU simulator.

Every value here is used as a keyword default, so a caller can override it
per call without touching this table.
"""
__author__ = "Rahul Rajesh 2360445"

CONSTANTS: dict[str, float] = {
    'unitary_tolerance':    1e-3,    # Frobenius bound on U·U† − I
    'eigen_tolerance':      1e-3,    # Off-diagonal norm at which Jacobi stops
    'eigen_max_iterations': 100,     # Jacobi sweeps before giving up
    'collapse_epsilon':     1e-15,   # Post-selected mass treated as empty
    'flip_probability':     0.3,     # Churn circuit: chance to invert the q0 reading
    'default_period':       0.1,     # Seconds between churn steps (100 ms)
    'history_window':       500,     # Reports kept by ReportBuffer
}

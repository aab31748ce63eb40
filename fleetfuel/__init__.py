"""FleetFuel Manager - gestion de flotte et carburant / fleet and fuel management."""

__version__ = "0.1.0"

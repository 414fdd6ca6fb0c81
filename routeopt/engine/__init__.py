"""
Simulation engine module.

Layers, agents and the fixed-step scheduler behind the application
container that the driver resolves and runs.
"""

from .agents import Car, Traveler, Trip, TripLeg, ModalType
from .layers import (
    Layer,
    CarLayer,
    CarParkingLayer,
    TrafficLightLayer,
    TravelerLayer,
)
from .simulation import Model, SimulationState, StepSimulation
from .container import SimulationContainer
from .starter import SimulationStarter

__all__ = [
    "Car",
    "Traveler",
    "Trip",
    "TripLeg",
    "ModalType",
    "Layer",
    "CarLayer",
    "CarParkingLayer",
    "TrafficLightLayer",
    "TravelerLayer",
    "Model",
    "SimulationState",
    "StepSimulation",
    "SimulationContainer",
    "SimulationStarter",
]

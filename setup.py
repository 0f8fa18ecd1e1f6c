"""
Trading Console Simulation
Deterministic, virtual-clock simulation of crypto strategy bots and a
StableFX RFQ/PvP desk feeding a live console
"""

from setuptools import setup, find_packages

setup(
    name="tradesim",
    version="0.1.0",
    description="Simulated trading-bot and stablecoin FX console feeds on a virtual clock",
    python_requires=">=3.10",
    packages=find_packages(include=["tradesim", "tradesim.*"]),
    install_requires=[
        line.strip()
        for line in open("requirements.txt")
        if line.strip() and not line.startswith("#")
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "isort>=5.12.0",
        ]
    },
)

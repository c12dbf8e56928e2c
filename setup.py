#!/usr/bin/env python3
"""lucOS Agent Sandbox - Setup"""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="lucos-agent-sandbox",
    version="1.0.0",
    description="Idempotent SSH, GitHub CLI and repository setup for an isolated coding-agent VM",
    author="lucOS",
    packages=find_packages(include=["agent_sandbox", "agent_sandbox.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "agent-sandbox-setup=agent_sandbox.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)

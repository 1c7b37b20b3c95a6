from setuptools import find_packages, setup

setup(
    name="minilaser",
    version="0.3.0",
    description="Driver for 1024x1024 serial laser engravers",
    packages=find_packages(include=["minilaser", "minilaser.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pyserial",
        "numpy",
        "Pillow>=7.0.0",
        "svgelements>=1.6.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "minilaser=minilaser.main:main",
        ],
    },
)

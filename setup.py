from setuptools import setup, find_packages

setup(
    name="duration_engine",
    version="0.1.0",
    description="Bond duration and convexity engine",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)

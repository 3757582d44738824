from setuptools import setup, find_packages

with open("requirements.txt") as f:
    required = f.read().splitlines()

setup(
    name="skythread",
    version="0.0.1",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=required,
    python_requires=">=3.10",
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["skythread = skythread.cli:main"]},
    description="Bluesky thread loader: handle resolution, caching and thread fetch",
)

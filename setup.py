from setuptools import find_packages, setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="scipy_cdpr",
    version="0.0.1",
    description="Fixed step integrators for constrained multibody systems and static cable models for cable-driven parallel robots, built on scipy.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["scipy_cdpr", "scipy_cdpr.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=["numpy", "scipy", "matplotlib", "tqdm"],
    extras_require={"test": ["pytest"]},
)

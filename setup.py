import setuptools

setuptools.setup(
    name="diceroll",
    version="0.1.0",
    description="Parse and roll tabletop dice notation with a full result trace",
    classifiers=["Programming Language :: Python :: 3"],
    python_requires=">=3.8",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    package_data={"diceroll": ["settings.default.yaml"]},
    entry_points={"console_scripts": ["diceroll=diceroll.__main__:main"]},
    install_requires=["pyyaml", "plotly", "kaleido", "pandas"],
    extras_require={"test": ["pytest"]},
)

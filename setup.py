import setuptools

setuptools.setup(
    name="diceroll",
    version="0.1.0",
    description="Dice notation parser and roller",
    classifiers=["Programming Language :: Python :: 3"],
    python_requires=">=3.8",
    packages=["diceroll"],
    package_data={"diceroll": ["roll.lark", "settings.default.yaml"]},
    entry_points={"console_scripts": ["diceroll=diceroll.__main__:main"]},
    install_requires=["lark", "pyyaml", "typer"],
    extras_require={"test": ["pytest"]},
)

from setuptools import setup, find_packages

setup(
    name="dynimp",
    version="1.0.0",
    description="网络边的一阶动力学重要性 (FoEDI) 评分与贪心加边",
    author="Your Name",
    packages=find_packages(include=["dynimp", "dynimp.*"]),
    install_requires=[
        "numpy>=1.21.0",
        "networkx>=2.6.0",
        "click>=8.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "dynimp=dynimp.main:main",
        ],
    },
    python_requires=">=3.7",
)

from setuptools import setup

setup(
    name='dspan',
    version='0.1',
    packages=['dspan', 'dspan.tasks', 'dspan.tools', 'dspan.tools.utils'],
    license='GPLv2',
    description='Digit span memory test: constrained random digit sequence generation (randomized backtracking with '
                'a bounded number of attempts and an unconstrained fallback), asynchronous generation workers, recall '
                'scoring and batch statistics of the generated sequences.',
    python_requires='>=3.8',
    install_requires=[
        "psutil",
        "pandas",
        "tqdm",
        "numpy>=1.17",
    ],
    extras_require={
        'test': ["pytest"],
    },
)

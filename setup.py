# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import os
import logging
import re

from setuptools import setup


readme_dir = os.path.dirname(__file__)
readme_filename = os.path.join(readme_dir, "README.md")

try:
    with open(readme_filename, "r") as f:
        readme = f.read()
except OSError:
    logging.warning("Failed to load %s" % readme_filename)
    readme = ""


with open(os.path.join(readme_dir, "allopep", "version.py"), "r") as f:
    version = re.search(
        r'^__version__\s*=\s*[\'"]([^\'"]*)[\'"]', f.read(), re.MULTILINE
    ).group(1)

if __name__ == "__main__":
    required_packages = [
        "numpy",
        "pandas>=0.20.3",
        "scikit-learn",
        "pyyaml",
        "tensorflow>=2.15.0",
    ]

    setup(
        name="allopep",
        version=version,
        description="MHC class I allotype classification of 9-mer peptides",
        license="http://www.apache.org/licenses/LICENSE-2.0.html",
        entry_points={
            "console_scripts": [
                "allopep-train = allopep.train_command:run",
                "allopep-predict = allopep.predict_command:run",
            ]
        },
        classifiers=[
            "Development Status :: 3 - Alpha",
            "Environment :: Console",
            "Operating System :: OS Independent",
            "Intended Audience :: Science/Research",
            "License :: OSI Approved :: Apache Software License",
            "Programming Language :: Python",
            "Topic :: Scientific/Engineering :: Bio-Informatics",
        ],
        install_requires=required_packages,
        extras_require={
            "test": ["pytest"],
        },
        long_description=readme,
        long_description_content_type="text/markdown",
        packages=[
            "allopep",
        ],
    )

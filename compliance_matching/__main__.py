"""Allow running as: python -m compliance_matching"""

from compliance_matching.main import main

if __name__ == "__main__":
    main()

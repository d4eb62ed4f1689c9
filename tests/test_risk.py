from api_change_detector.diff.risk import RiskLevel, classify_group, classify_overall


class TestClassifyGroup:
    def test_critical(self):
        assert classify_group(6, 0) is RiskLevel.CRITICAL
        assert classify_group(6, 50) is RiskLevel.CRITICAL

    def test_high(self):
        assert classify_group(3, 0) is RiskLevel.HIGH
        assert classify_group(5, 0) is RiskLevel.HIGH

    def test_medium(self):
        assert classify_group(1, 0) is RiskLevel.MEDIUM
        assert classify_group(2, 0) is RiskLevel.MEDIUM
        assert classify_group(0, 11) is RiskLevel.MEDIUM

    def test_low(self):
        assert classify_group(0, 0) is RiskLevel.LOW
        assert classify_group(0, 10) is RiskLevel.LOW


class TestClassifyOverall:
    def test_thresholds_differ_from_group(self):
        assert classify_overall(6, 0) is RiskLevel.HIGH
        assert classify_overall(3, 0) is RiskLevel.MEDIUM
        assert classify_overall(0, 11) is RiskLevel.LOW

    def test_critical(self):
        assert classify_overall(11, 0) is RiskLevel.CRITICAL
        assert classify_overall(10, 0) is RiskLevel.HIGH

    def test_medium_from_modifications(self):
        assert classify_overall(0, 21) is RiskLevel.MEDIUM
        assert classify_overall(0, 20) is RiskLevel.LOW

    def test_low(self):
        assert classify_overall(0, 0) is RiskLevel.LOW

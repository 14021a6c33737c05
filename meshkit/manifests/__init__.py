"""Generation of workload definitions and schemas from CRD manifests, title formatting and $ref resolution."""